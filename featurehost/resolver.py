"""FEATUREHOST FILE PURPOSE
Purpose: compute the enabled feature set from use rules and group selection.
Hot path: yes (runs on every config change).
Feature flags: none (rules arrive via host config).
Failure mode: pure; unknown rules and groups contribute nothing.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping

from featurehost.catalog import Feature
from featurehost.groups import REQUIRED_FEATURE_GROUP

SAMPLE_PREFIX = "sample_"


class Rule(str, Enum):
    ALWAYS = "always"
    NEVER = "never"
    DEFAULT = "default"


def default_rule(feature: Feature) -> Rule:
    return Rule.NEVER if feature.id.startswith(SAMPLE_PREFIX) else Rule.DEFAULT


def parse_rule(raw: Any) -> Rule | None:
    # `true` is the legacy spelling of "always".
    if raw is True:
        return Rule.ALWAYS
    if isinstance(raw, str):
        try:
            return Rule(raw)
        except ValueError:
            return None
    return None


def resolve_enabled_features(
    features: Iterable[Feature],
    rules: Mapping[str, Any] | None,
    enabled_groups: Iterable[str] | None,
    group_index: Mapping[str, frozenset[Feature]],
) -> frozenset[Feature]:
    """Return the features that should be active.

    A feature is enabled when its rule is ``always``, when its rule is
    ``default`` and one of the enabled groups contains it, or when it belongs
    to the required group. Required membership wins over an explicit
    ``never``. ``enabled_groups=None`` makes every feature group-eligible.
    """
    features = list(features)
    rules = rules or {}

    if enabled_groups is None:
        eligible = frozenset(features)
    else:
        eligible = frozenset().union(*(group_index.get(g, frozenset()) for g in enabled_groups))

    required = group_index.get(REQUIRED_FEATURE_GROUP, frozenset())

    enabled = set()
    for feature in features:
        rule = parse_rule(rules[feature.id]) if feature.id in rules else default_rule(feature)
        if (
            rule is Rule.ALWAYS
            or (rule is Rule.DEFAULT and feature in eligible)
            or feature in required
        ):
            enabled.add(feature)
    return frozenset(enabled)
