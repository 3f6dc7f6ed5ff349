"""FEATUREHOST FILE PURPOSE
Purpose: coarse activation ordering (repository providers first).
Hot path: no (startup only).
Feature flags: none.
Failure mode: pure function; cannot fail on valid features.
"""

from __future__ import annotations

from typing import Iterable

from featurehost.catalog import Feature

PRIORITY_CAPABILITY = "repository-provider"


def provides_priority_capability(feature: Feature) -> bool:
    return PRIORITY_CAPABILITY in feature.provided_capabilities


def reorder_features(features: Iterable[Feature]) -> list[Feature]:
    """Move providers of the synchronous repository lookup ahead of everything else.

    Consumers may call that lookup while they activate, and there is no real
    dependency resolution between features, so this boost is the only ordering
    guarantee. Both partitions keep their input order.
    """
    features = list(features)
    providers = [f for f in features if provides_priority_capability(f)]
    others = [f for f in features if not provides_priority_capability(f)]
    return providers + others
