"""FEATUREHOST FILE PURPOSE
Purpose: declared feature groups (group name -> feature keys).
Hot path: no.
Feature flags: featurehost.enabled_feature_groups selects among these.
Failure mode: unknown keys are ignored when the index is built.
"""

FEATURE_GROUPS = {
    "featurehost-required": ["repo_provider"],
    "core": ["status_bar", "diagnostics"],
    "preview": ["outline_preview", "sample_feature"],
}
