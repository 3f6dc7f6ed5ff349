"""FEATUREHOST FILE PURPOSE
Purpose: in-memory diagnostics collector.
Hot path: low.
Feature flags: featurehost.use.diagnostics.
Failure mode: reports are dropped while inactive; only the newest max_reports are kept.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])

_reports: list[dict[str, Any]] = []


class Report(BaseModel):
    model_config = ConfigDict(extra="forbid")

    source: str = Field(min_length=1)
    message: str = Field(min_length=1)
    severity: str = "warning"


@router.post("")
async def add_report(report: Report) -> dict[str, int]:
    _reports.append(report.model_dump())
    del _reports[: -FEATURE["config"]["max_reports"]["default"]]
    return {"count": len(_reports)}


@router.get("")
async def list_reports() -> dict[str, Any]:
    return {"reports": list(_reports)}


def activate(state: dict[str, Any] | None) -> None:
    _reports[:] = list((state or {}).get("reports", []))


def deactivate() -> None:
    _reports.clear()


def serialize() -> dict[str, Any]:
    return {"reports": list(_reports)}


FEATURE = {
    "key": "diagnostics",
    "display_name": "Diagnostics",
    "description": "Collects diagnostics reported by other tools",
    "provides": ["diagnostics"],
    "consumes": [],
    "config": {
        "max_reports": {"type": "integer", "default": 500, "title": "Maximum reports"},
    },
}
