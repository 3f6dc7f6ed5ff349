"""FEATUREHOST FILE PURPOSE
Purpose: index declared feature groups (group name -> member features).
Hot path: no (built once at construction).
Feature flags: none.
Failure mode: unknown member names are dropped silently.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, Mapping

from featurehost.catalog import Feature

REQUIRED_FEATURE_GROUP = "featurehost-required"


def group_features(
    features: Iterable[Feature],
    group_definitions: Mapping[str, Any] | None,
) -> Mapping[str, frozenset[Feature]]:
    """Construct a read-only map from group name to the features in that group."""
    names_to_features = {feature.id: feature for feature in features}

    groups: dict[str, frozenset[Feature]] = {}
    for name, members in (group_definitions or {}).items():
        if not isinstance(members, (list, tuple)):
            continue
        groups[name] = frozenset(
            names_to_features[member] for member in members if member in names_to_features
        )
    return MappingProxyType(groups)
