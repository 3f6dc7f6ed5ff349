"""FEATUREHOST FILE PURPOSE
Purpose: build the owner's config schema (per-feature use rules + merged feature configs).
Hot path: no (built once during load).
Feature flags: FH_DEV_MODE (capability annotations).
Failure mode: pure; features without their own config add only a use entry.
"""

from __future__ import annotations

from typing import Any, Iterable

from featurehost.catalog import Feature
from featurehost.resolver import Rule, default_rule


def _use_setting(feature: Feature, dev_mode: bool) -> dict[str, Any]:
    title = (
        f'Enable the "{feature.id}" feature'
        if feature.display_name is None
        else f"Enable {feature.display_name}"
    )
    description = feature.description or ""
    if dev_mode:
        if feature.provided_capabilities:
            provides = ", ".join(sorted(feature.provided_capabilities))
            description += f"<br/>**Provides:** _{provides}_"
        if feature.consumed_capabilities:
            consumes = ", ".join(sorted(feature.consumed_capabilities))
            description += f"<br/>**Consumes:** _{consumes}_"

    return {
        "title": title,
        "description": description,
        "type": "string",
        "enum": [
            {"value": Rule.ALWAYS.value, "description": "Always enabled"},
            {"value": Rule.NEVER.value, "description": "Never enabled"},
            {"value": Rule.DEFAULT.value, "description": "Only when in an enabled feature group"},
        ],
        "default": default_rule(feature).value,
    }


def build_config_schema(features: Iterable[Feature], *, dev_mode: bool = False) -> dict[str, Any]:
    """Build the schema shown by the settings surface.

    Contains a ``use`` entry with one tri-state rule per feature, the
    ``enabled_feature_groups`` selection, and each feature's own config
    merged under its id.
    """
    config: dict[str, Any] = {
        "use": {
            "title": "Enabled Features",
            "description": "Enable and disable individual features",
            "type": "object",
            "collapsed": True,
            "properties": {},
        },
        "enabled_feature_groups": {
            "title": "Enabled Feature Groups",
            "description": "Features with a default rule are enabled only in these groups; unset enables all",
            "type": ["array", "null"],
            "items": {"type": "string"},
            "default": None,
        },
    }

    for feature in features:
        config["use"]["properties"][feature.id] = _use_setting(feature, dev_mode)

        if feature.config:
            config[feature.id] = {
                "type": "object",
                "title": feature.display_name,
                "description": feature.description,
                "collapsed": True,
                "properties": {
                    key: {**value, "title": value.get("title") or key}
                    for key, value in feature.config.items()
                },
            }
    return config
