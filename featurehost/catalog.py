"""FEATUREHOST FILE PURPOSE
Purpose: static feature catalog (descriptors + discovery of one-file feature modules).
Hot path: no (startup only).
Feature flags: none.
Failure mode: invalid feature module => skipped with a warning; duplicate id => ValueError.
"""

from __future__ import annotations

import importlib
import pkgutil
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from types import ModuleType
from typing import Any, Iterable

from featurehost.logging import logger


@dataclass(frozen=True)
class Feature:
    id: str
    path: str
    display_name: str | None = None
    description: str = ""
    provided_capabilities: frozenset[str] = frozenset()
    consumed_capabilities: frozenset[str] = frozenset()
    config: dict[str, Any] | None = field(default=None, compare=False, hash=False)
    experimental: bool = False


def feature_id_from_path(path: str) -> str:
    # Only dotted module names split on dots.
    if "/" in path:
        return PurePosixPath(path).name
    return path.rsplit(".", 1)[-1]


def build_catalog(features: Iterable[Feature]) -> tuple[Feature, ...]:
    catalog = tuple(features)
    seen: set[str] = set()
    for feature in catalog:
        if feature.id in seen:
            raise ValueError(f"duplicate feature id: {feature.id}")
        seen.add(feature.id)
    return catalog


def _validate(feature: Any) -> dict[str, Any] | None:
    if not isinstance(feature, dict):
        return None
    if not {"key", "display_name", "description"}.issubset(feature.keys()):
        return None
    if not isinstance(feature.get("key"), str) or not feature["key"]:
        return None
    for name in ("provides", "consumes"):
        value = feature.get(name, ())
        if not isinstance(value, (list, tuple, set, frozenset)):
            return None
    config = feature.get("config")
    if config is not None and not isinstance(config, dict):
        return None
    return feature


def feature_from_module(module_name: str, d: dict[str, Any]) -> Feature:
    return Feature(
        id=feature_id_from_path(module_name),
        path=module_name,
        display_name=d.get("display_name"),
        description=d.get("description") or "",
        provided_capabilities=frozenset(d.get("provides", ())),
        consumed_capabilities=frozenset(d.get("consumes", ())),
        config=d.get("config"),
        experimental=bool(d.get("experimental", False)),
    )


def discover_features(package: str = "features") -> tuple[tuple[Feature, ...], dict[str, ModuleType]]:
    """Import every feature module in ``package`` and build the catalog.

    Modules are visited in name order so the catalog order is stable across
    runs. Returns the catalog and a mapping of feature id to module.
    """
    pkg = importlib.import_module(package)

    found: list[Feature] = []
    modules: dict[str, ModuleType] = {}
    for mod in sorted(pkgutil.iter_modules(pkg.__path__), key=lambda m: m.name):
        if mod.ispkg or mod.name.startswith("_") or mod.name == "groups":
            continue
        module_name = f"{package}.{mod.name}"
        m = importlib.import_module(module_name)
        d = _validate(getattr(m, "FEATURE", None))
        if d is None:
            logger.warning("FEATURE_INVALID module=%s", mod.name)
            continue
        if d["key"] != mod.name:
            logger.warning("FEATURE_KEY_MISMATCH module=%s key=%s", mod.name, d["key"])
            continue

        feature = feature_from_module(module_name, d)
        found.append(feature)
        modules[feature.id] = m

    catalog = build_catalog(found)
    logger.info("FEATURES_DISCOVERED keys=%s", [f.id for f in catalog])
    return catalog, modules
