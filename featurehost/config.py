"""FEATUREHOST FILE PURPOSE
Purpose: environment configuration helpers (safe defaults).
Hot path: yes (read-only env lookups; lightweight).
Feature flags: FH_DEBUG, FH_DEV_MODE, FH_OWNER, FH_USE, FH_ENABLED_FEATURE_GROUPS.
Failure mode: safe defaults when unset or malformed.
"""

from __future__ import annotations

import json
import os
from typing import Any

DEFAULT_OWNER = "featurehost"


def env_flag(name: str, default: str = "0") -> bool:
    v = (os.getenv(name) or default).strip().lower()
    return v in ("1", "true", "yes", "on")


def is_debug() -> bool:
    return env_flag("FH_DEBUG", "0")


def is_dev_mode() -> bool:
    return env_flag("FH_DEV_MODE", "0")


def owner_name() -> str:
    return (os.getenv("FH_OWNER") or "").strip() or DEFAULT_OWNER


def env_feature_rules() -> dict[str, Any] | None:
    raw = (os.getenv("FH_USE") or "").strip()
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def env_enabled_feature_groups() -> list[str] | None:
    raw = os.getenv("FH_ENABLED_FEATURE_GROUPS")
    if raw is None:
        return None
    return [g.strip() for g in raw.split(",") if g.strip()]
