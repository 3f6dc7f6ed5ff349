"""FEATUREHOST FILE PURPOSE
Purpose: host collaborator boundary (protocol, disposables, one-shot load callback).
Hot path: no.
Feature flags: none.
Failure mode: disposables are idempotent; disposing twice is a no-op.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol


class Disposable:
    def __init__(self, teardown: Callable[[], Any] | None = None) -> None:
        self._teardown = teardown
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        if self._teardown is not None:
            self._teardown()


class CompositeDisposable(Disposable):
    """Holds several disposables and tears them all down together, once."""

    def __init__(self, *children: Disposable) -> None:
        super().__init__()
        self._children: list[Disposable] = list(children)

    def add(self, *children: Disposable) -> None:
        if self.disposed:
            for child in children:
                child.dispose()
            return
        self._children.extend(children)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        children, self._children = self._children, []
        for child in children:
            child.dispose()


class Host(Protocol):
    def request_load(self, feature_id: str) -> None: ...

    def request_activate(self, feature_id: str) -> None: ...

    def request_deactivate(self, feature_id: str, suppress_serialization: bool = False) -> None: ...

    def request_serialize(self, feature_id: str) -> None: ...

    def is_currently_active(self, feature_id: str) -> bool: ...

    def on_config_key_changed(self, key: str, callback: Callable[[Any], None]) -> Disposable: ...

    def on_owner_package_loaded(self, callback: Callable[[str], None]) -> Disposable: ...

    def get_config_value(self, key: str) -> Any: ...

    def register_config_schema(self, owner: str, schema: dict[str, Any]) -> None: ...

    def clear_deferred_load_flag(self, owner: str) -> None: ...


def when_owner_loaded(
    host: Host,
    owner: str,
    callback: Callable[[], Disposable | None],
) -> Disposable:
    """Run ``callback`` the first time ``owner`` finishes loading.

    The host subscription is dropped as soon as it fires; whatever the
    callback returns is kept and disposed with the returned handle.
    """
    disposables = CompositeDisposable()
    subscription: Disposable | None = None
    fired = False

    def _on_loaded(name: str) -> None:
        nonlocal fired
        if name != owner or fired:
            return
        fired = True
        if subscription is not None:
            subscription.dispose()
        result = callback()
        if result is not None:
            disposables.add(result)

    subscription = host.on_owner_package_loaded(_on_loaded)
    if fired:
        subscription.dispose()
    disposables.add(subscription)
    return disposables
