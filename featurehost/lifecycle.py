"""FEATUREHOST FILE PURPOSE
Purpose: feature lifecycle controller (load -> activate -> reconcile -> deactivate -> serialize).
Hot path: yes (reconciliation runs on every use-rule / feature-group change).
Feature flags: none directly (rules and groups are host config keys).
Failure mode: out-of-order lifecycle calls raise LifecycleError; per-feature host
failures are logged and skipped.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from featurehost.catalog import Feature, build_catalog
from featurehost.groups import group_features
from featurehost.host import CompositeDisposable, Disposable, Host, when_owner_loaded
from featurehost.logging import logger
from featurehost.ordering import reorder_features
from featurehost.resolver import resolve_enabled_features
from featurehost.schema import build_config_schema

ExperimentalLoader = Callable[[list[Feature]], Disposable]


class LifecycleError(RuntimeError):
    pass


class LifecycleState(str, Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"


class FeatureLoader:
    """Keeps the host's active features in line with the owner's config.

    Config-change callbacks may arrive from more than one thread (the HTTP
    surface runs sync handlers in a threadpool), so every method touching the
    active set holds ``_lock`` for its whole duration.
    """

    def __init__(
        self,
        host: Host,
        owner: str,
        features: Iterable[Feature],
        group_definitions: Mapping[str, Any] | None = None,
        *,
        experimental_loader: ExperimentalLoader | None = None,
        dev_mode: bool = False,
    ) -> None:
        self._host = host
        self._owner = owner
        self._features = reorder_features(build_catalog(features))
        self._feature_groups = group_features(self._features, group_definitions)
        self._experimental_loader = experimental_loader
        self._dev_mode = dev_mode

        self._state = LifecycleState.UNLOADED
        self._config: dict[str, Any] | None = None
        self._load_disposable = CompositeDisposable()
        self._activation_disposable: CompositeDisposable | None = None
        self._currently_active: frozenset[Feature] = frozenset()
        self._lock = threading.RLock()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def features(self) -> tuple[Feature, ...]:
        return tuple(self._features)

    @property
    def active_features(self) -> frozenset[Feature]:
        return self._currently_active

    @property
    def use_key_path(self) -> str:
        return f"{self._owner}.use"

    @property
    def enabled_feature_groups_key_path(self) -> str:
        return f"{self._owner}.enabled_feature_groups"

    def _require(self, expected: LifecycleState, op: str) -> None:
        if self._state is not expected:
            raise LifecycleError(f"{op}() requires state {expected.value}, got {self._state.value}")

    def load(self) -> None:
        self._require(LifecycleState.UNLOADED, "load")

        self._config = build_config_schema(self._features, dev_mode=self._dev_mode)
        self._host.register_config_schema(self._owner, self._config)

        # Requesting feature loads while the owner itself is still loading
        # reverses activation order in the host, so wait for it to finish.
        self._load_disposable.add(when_owner_loaded(self._host, self._owner, self._load_enabled_features))
        self._state = LifecycleState.LOADED

    def _load_enabled_features(self) -> Disposable | None:
        enabled = self.get_enabled_features()
        to_load = [f for f in self._features if f in enabled]
        for feature in to_load:
            self._host.request_load(feature.id)

        experimental = [f for f in to_load if f.experimental]
        if self._experimental_loader is None or not experimental:
            return None
        return self._experimental_loader(experimental)

    def activate(self) -> None:
        with self._lock:
            self._require(LifecycleState.LOADED, "activate")

            # Failsafe in case the host deferred loading our main module.
            self._host.clear_deferred_load_flag(self._owner)

            self._activation_disposable = CompositeDisposable(
                self._host.on_config_key_changed(self.use_key_path, lambda _: self.update_active_features()),
                self._host.on_config_key_changed(
                    self.enabled_feature_groups_key_path, lambda _: self.update_active_features()
                ),
            )
            self._state = LifecycleState.ACTIVATED
            self.update_active_features()

    def update_active_features(self) -> None:
        """Activate newly enabled features, then deactivate newly disabled ones."""
        with self._lock:
            self._require(LifecycleState.ACTIVATED, "update_active_features")
            desired = self.get_enabled_features()

            for feature in self._features:
                if feature in desired and feature not in self._currently_active:
                    self._safe_activate(feature)

            for feature in self._features:
                if feature in self._currently_active and feature not in desired:
                    self._safe_deactivate(feature, suppress_serialization=True)

            self._currently_active = desired
            logger.info("FEATURES_ACTIVE keys=%s", sorted(f.id for f in desired))

    def deactivate(self) -> None:
        with self._lock:
            self._require(LifecycleState.ACTIVATED, "deactivate")

            # Serialization happens in its own phase; serializing here could
            # persist state after a service it depends on is already gone.
            for feature in self._features:
                if feature in self._currently_active:
                    self._safe_deactivate(feature, suppress_serialization=True)
            self._currently_active = frozenset()

            if self._activation_disposable is not None:
                self._activation_disposable.dispose()
                self._activation_disposable = None
            self._load_disposable.dispose()
            self._state = LifecycleState.DEACTIVATED

    def serialize(self) -> None:
        with self._lock:
            for feature in self._features:
                self._safe_serialize(feature)

    def get_enabled_features(self) -> frozenset[Feature]:
        rules = self._host.get_config_value(self.use_key_path)
        enabled_groups = self._host.get_config_value(self.enabled_feature_groups_key_path)
        return resolve_enabled_features(
            self._features,
            rules if isinstance(rules, Mapping) else None,
            enabled_groups if isinstance(enabled_groups, (list, tuple)) else None,
            self._feature_groups,
        )

    def get_config(self) -> dict[str, Any]:
        if self._config is None:
            raise LifecycleError("get_config() called before load()")
        return self._config

    def _safe_activate(self, feature: Feature) -> None:
        try:
            self._host.request_activate(feature.id)
        except Exception as e:
            logger.error("FEATURE_ACTIVATE_FAILED feature=%s error=%s", feature.id, e)

    def _safe_deactivate(self, feature: Feature, suppress_serialization: bool = False) -> None:
        try:
            self._host.request_deactivate(feature.id, suppress_serialization)
        except Exception as e:
            logger.error("FEATURE_DEACTIVATE_FAILED feature=%s error=%s", feature.id, e)

    def _safe_serialize(self, feature: Feature) -> None:
        try:
            if self._host.is_currently_active(feature.id):
                self._host.request_serialize(feature.id)
        except Exception as e:
            logger.error("FEATURE_SERIALIZE_FAILED feature=%s error=%s", feature.id, e)
