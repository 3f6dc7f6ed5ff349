"""FEATUREHOST FILE PURPOSE
Purpose: in-process host that drives one-file feature modules and an observable config store.
Hot path: low (feature hooks run on activation changes only).
Feature flags: FH_USE, FH_ENABLED_FEATURE_GROUPS (seed values).
Failure mode: feature hook errors propagate to the caller (the lifecycle
controller logs and isolates them).
"""

from __future__ import annotations

import copy
import threading
from types import ModuleType
from typing import Any, Callable

from featurehost.catalog import Feature
from featurehost.config import env_enabled_feature_groups, env_feature_rules
from featurehost.host import Disposable
from featurehost.logging import logger


class ConfigStore:
    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})
        self._listeners: dict[str, list[Callable[[Any], None]]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls, owner: str) -> ConfigStore:
        values: dict[str, Any] = {}
        rules = env_feature_rules()
        if rules is not None:
            values[f"{owner}.use"] = rules
        groups = env_enabled_feature_groups()
        if groups is not None:
            values[f"{owner}.enabled_feature_groups"] = groups
        return cls(values)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return copy.deepcopy(self._values.get(key, default))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if key in self._values and self._values[key] == value:
                return
            self._values[key] = copy.deepcopy(value)
            listeners = list(self._listeners.get(key, ()))
        for listener in listeners:
            listener(value)

    def unset(self, key: str) -> None:
        with self._lock:
            if key not in self._values:
                return
            del self._values[key]
            listeners = list(self._listeners.get(key, ()))
        for listener in listeners:
            listener(None)

    def on_did_change(self, key: str, callback: Callable[[Any], None]) -> Disposable:
        with self._lock:
            self._listeners.setdefault(key, []).append(callback)

        def _remove() -> None:
            with self._lock:
                listeners = self._listeners.get(key, [])
                if callback in listeners:
                    listeners.remove(callback)

        return Disposable(_remove)


class ModuleHost:
    """Host backed by imported feature modules.

    A module may define ``activate(state)``, ``deactivate()`` and
    ``serialize()``; missing hooks are skipped. ``serialize()`` output is
    kept and handed back to ``activate`` the next time the feature starts.
    """

    def __init__(self, modules: dict[str, ModuleType], config: ConfigStore) -> None:
        self._modules = modules
        self.config = config
        self.schemas: dict[str, dict[str, Any]] = {}
        self.saved_state: dict[str, Any] = {}
        self.loaded: set[str] = set()
        self.experimental: set[str] = set()
        self._active: set[str] = set()
        self._owner_loaded_callbacks: list[Callable[[str], None]] = []

    def _module(self, feature_id: str) -> ModuleType:
        try:
            return self._modules[feature_id]
        except KeyError:
            raise KeyError(f"unknown feature: {feature_id}") from None

    def request_load(self, feature_id: str) -> None:
        self._module(feature_id)
        self.loaded.add(feature_id)

    def request_activate(self, feature_id: str) -> None:
        if feature_id in self._active:
            return
        if feature_id not in self.loaded:
            self.request_load(feature_id)
        hook = getattr(self._module(feature_id), "activate", None)
        if hook is not None:
            hook(self.saved_state.get(feature_id))
        self._active.add(feature_id)
        logger.info("FEATURE_ACTIVATED feature=%s", feature_id)

    def request_deactivate(self, feature_id: str, suppress_serialization: bool = False) -> None:
        if feature_id not in self._active:
            return
        try:
            if not suppress_serialization:
                self.request_serialize(feature_id)
            hook = getattr(self._module(feature_id), "deactivate", None)
            if hook is not None:
                hook()
        finally:
            self._active.discard(feature_id)
        logger.info("FEATURE_DEACTIVATED feature=%s", feature_id)

    def request_serialize(self, feature_id: str) -> None:
        hook = getattr(self._module(feature_id), "serialize", None)
        if hook is None:
            return
        state = hook()
        if state is not None:
            self.saved_state[feature_id] = state

    def is_currently_active(self, feature_id: str) -> bool:
        return feature_id in self._active

    def on_config_key_changed(self, key: str, callback: Callable[[Any], None]) -> Disposable:
        return self.config.on_did_change(key, callback)

    def on_owner_package_loaded(self, callback: Callable[[str], None]) -> Disposable:
        self._owner_loaded_callbacks.append(callback)

        def _remove() -> None:
            if callback in self._owner_loaded_callbacks:
                self._owner_loaded_callbacks.remove(callback)

        return Disposable(_remove)

    def finish_loading(self, owner: str) -> None:
        for callback in list(self._owner_loaded_callbacks):
            callback(owner)

    def get_config_value(self, key: str) -> Any:
        return self.config.get(key)

    def register_config_schema(self, owner: str, schema: dict[str, Any]) -> None:
        self.schemas[owner] = schema

    def clear_deferred_load_flag(self, owner: str) -> None:
        self.config.unset(f"{owner}.defer_main_module")

    def activate_experimental(self, features: list[Feature]) -> Disposable:
        ids = [f.id for f in features]
        for feature_id in ids:
            self.request_load(feature_id)
            self.experimental.add(feature_id)

        def _unload() -> None:
            for feature_id in ids:
                self.experimental.discard(feature_id)

        return Disposable(_unload)
