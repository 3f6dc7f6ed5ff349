"""FEATUREHOST FILE PURPOSE
Purpose: synchronous repository lookup used by other features while they activate.
Hot path: yes (lookups are synchronous).
Feature flags: featurehost.use.repo_provider.
Failure mode: lookups before activation return None.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

router = APIRouter(prefix="/repo", tags=["repo"])

_repositories: dict[str, str] | None = None


def lookup(path: str) -> str | None:
    if _repositories is None:
        return None
    for root, name in _repositories.items():
        if path == root or path.startswith(root.rstrip("/") + "/"):
            return name
    return None


@router.get("/lookup")
async def repo_lookup(path: str) -> dict[str, Any]:
    return {"path": path, "repository": lookup(path)}


def activate(state: dict[str, Any] | None) -> None:
    global _repositories
    _repositories = dict((state or {}).get("repositories", {}))


def deactivate() -> None:
    global _repositories
    _repositories = None


def serialize() -> dict[str, Any] | None:
    if _repositories is None:
        return None
    return {"repositories": dict(_repositories)}


FEATURE = {
    "key": "repo_provider",
    "display_name": "Repository Provider",
    "description": "Maps paths to the repository that contains them",
    "provides": ["repository-provider"],
    "consumes": [],
}
