from __future__ import annotations

from typing import Callable

from featurehost.host import CompositeDisposable, Disposable, when_owner_loaded


def test_disposable_runs_teardown_once() -> None:
    calls: list[int] = []
    d = Disposable(lambda: calls.append(1))
    d.dispose()
    d.dispose()
    assert calls == [1]
    assert d.disposed


def test_composite_disposes_children_and_late_additions() -> None:
    calls: list[str] = []
    composite = CompositeDisposable(Disposable(lambda: calls.append("a")))
    composite.add(Disposable(lambda: calls.append("b")))
    composite.dispose()
    composite.add(Disposable(lambda: calls.append("late")))
    composite.dispose()
    assert calls == ["a", "b", "late"]


class _Host:
    def __init__(self, already_loaded: str | None = None) -> None:
        self.callbacks: list[Callable[[str], None]] = []
        self.already_loaded = already_loaded

    def on_owner_package_loaded(self, callback: Callable[[str], None]) -> Disposable:
        self.callbacks.append(callback)
        if self.already_loaded is not None:
            callback(self.already_loaded)
        return Disposable(lambda: self.callbacks.remove(callback) if callback in self.callbacks else None)

    def fire(self, name: str) -> None:
        for callback in list(self.callbacks):
            callback(name)


def test_when_owner_loaded_fires_once_and_keeps_result() -> None:
    host = _Host()
    fired: list[int] = []
    released: list[bool] = []

    def _cb() -> Disposable:
        fired.append(1)
        return Disposable(lambda: released.append(True))

    handle = when_owner_loaded(host, "owner", _cb)
    host.fire("other")
    host.fire("owner")
    host.fire("owner")

    assert fired == [1]
    assert host.callbacks == []
    handle.dispose()
    assert released == [True]


def test_when_owner_loaded_handles_synchronous_fire() -> None:
    host = _Host(already_loaded="owner")
    fired: list[int] = []

    when_owner_loaded(host, "owner", lambda: fired.append(1))
    host.fire("owner")

    assert fired == [1]
    assert host.callbacks == []
