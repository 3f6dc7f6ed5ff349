"""FEATUREHOST FILE PURPOSE
Purpose: minimal sample feature.
Hot path: no.
Feature flags: featurehost.use.sample_feature.
Failure mode: disabled by default (sample_ prefix => "never").
"""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter()


@router.get("/sample/ping")
async def ping() -> dict[str, bool]:
    return {"ok": True}


FEATURE = {
    "key": "sample_feature",
    "display_name": None,
    "description": "Minimal sample feature",
    "provides": [],
    "consumes": [],
}
