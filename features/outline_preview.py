"""FEATUREHOST FILE PURPOSE
Purpose: experimental outline preview, loaded through the experimental path.
Hot path: no.
Feature flags: featurehost.use.outline_preview.
Failure mode: off unless the "preview" group or an always rule enables it.
"""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(prefix="/outline", tags=["outline"])


@router.get("/ping")
async def ping() -> dict[str, bool]:
    return {"ok": True}


FEATURE = {
    "key": "outline_preview",
    "display_name": "Outline Preview",
    "description": "Experimental outline of the current file",
    "provides": [],
    "consumes": ["diagnostics"],
    "experimental": True,
}
