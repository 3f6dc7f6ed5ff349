"""FEATUREHOST FILE PURPOSE
Purpose: status summary for a path (label + view counter).
Hot path: no.
Feature flags: featurehost.use.status_bar.
Failure mode: counter restarts from zero when no saved state exists.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

router = APIRouter(prefix="/status-bar", tags=["status-bar"])

_views = 0


@router.get("")
async def status(path: str = "/") -> dict[str, Any]:
    global _views
    _views += 1
    return {"path": path, "label": path.rstrip("/").rsplit("/", 1)[-1] or "/", "views": _views}


def activate(state: dict[str, Any] | None) -> None:
    global _views
    _views = int((state or {}).get("views", 0))


def deactivate() -> None:
    global _views
    _views = 0


def serialize() -> dict[str, Any]:
    return {"views": _views}


FEATURE = {
    "key": "status_bar",
    "display_name": "Status Bar",
    "description": "Shows a short label for the current path",
    "provides": [],
    "consumes": ["repository-provider"],
}
