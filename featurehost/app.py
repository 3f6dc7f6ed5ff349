"""FEATUREHOST FILE PURPOSE
Purpose: create FastAPI app, run the feature lifecycle, and expose feature admin endpoints.
Hot path: no (startup + admin control-plane).
Feature flags: FH_OWNER, FH_DEV_MODE, FH_USE, FH_ENABLED_FEATURE_GROUPS.
Failure mode: start with core routes even if no features are enabled; inactive
feature routes answer 404.
"""

from __future__ import annotations

import importlib
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict

from featurehost.catalog import discover_features
from featurehost.config import is_dev_mode, owner_name
from featurehost.lifecycle import FeatureLoader, LifecycleState
from featurehost.resolver import Rule
from featurehost.runtime import ConfigStore, ModuleHost


class RulesUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rules: dict[str, Rule]


class GroupsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    groups: list[str] | None = None


def _feature_groups(package: str) -> dict[str, Any]:
    try:
        mod = importlib.import_module(f"{package}.groups")
    except ModuleNotFoundError:
        return {}
    groups = getattr(mod, "FEATURE_GROUPS", None)
    return groups if isinstance(groups, dict) else {}


def _loader(request: Request) -> FeatureLoader:
    return request.app.state.feature_loader


def _host(request: Request) -> ModuleHost:
    return request.app.state.feature_host


def _require_active(feature_id: str):
    def _dep(request: Request) -> None:
        if not _host(request).is_currently_active(feature_id):
            raise HTTPException(status_code=404, detail="feature inactive")

    return Depends(_dep)


router = APIRouter(prefix="/features", tags=["features"])


@router.get("")
def list_features(request: Request) -> dict[str, Any]:
    loader = _loader(request)
    host = _host(request)
    return {
        "state": loader.state.value,
        "features": [
            {
                "id": f.id,
                "display_name": f.display_name,
                "description": f.description,
                "provides": sorted(f.provided_capabilities),
                "consumes": sorted(f.consumed_capabilities),
                "experimental": f.experimental,
                "active": host.is_currently_active(f.id),
            }
            for f in loader.features
        ],
    }


@router.get("/schema")
def config_schema(request: Request) -> dict[str, Any]:
    return _loader(request).get_config()


@router.put("/rules")
def update_rules(body: RulesUpdate, request: Request) -> dict[str, Any]:
    loader = _loader(request)
    known = {f.id for f in loader.features}
    unknown = sorted(set(body.rules) - known)
    if unknown:
        raise HTTPException(status_code=422, detail=f"unknown features: {', '.join(unknown)}")
    _host(request).config.set(loader.use_key_path, {k: v.value for k, v in body.rules.items()})
    return {"active": sorted(f.id for f in loader.active_features)}


@router.put("/groups")
def update_groups(body: GroupsUpdate, request: Request) -> dict[str, Any]:
    loader = _loader(request)
    host = _host(request)
    if body.groups is None:
        host.config.unset(loader.enabled_feature_groups_key_path)
    else:
        host.config.set(loader.enabled_feature_groups_key_path, body.groups)
    return {"active": sorted(f.id for f in loader.active_features)}


@router.post("/serialize")
def serialize_features(request: Request) -> dict[str, Any]:
    _loader(request).serialize()
    return {"ok": True, "serialized": sorted(_host(request).saved_state)}


def create_app(package: str = "features") -> FastAPI:
    owner = owner_name()
    catalog, modules = discover_features(package)
    host = ModuleHost(modules, ConfigStore.from_env(owner))
    loader = FeatureLoader(
        host,
        owner,
        catalog,
        _feature_groups(package),
        experimental_loader=host.activate_experimental,
        dev_mode=is_dev_mode(),
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if loader.state is LifecycleState.ACTIVATED:
            loader.serialize()
            loader.deactivate()

    app = FastAPI(lifespan=lifespan)
    app.state.feature_host = host
    app.state.feature_loader = loader

    @app.get("/")
    async def root() -> dict[str, bool]:
        return {"ok": True}

    app.include_router(router)
    for feature in catalog:
        feature_router = getattr(modules[feature.id], "router", None)
        if feature_router is not None:
            app.include_router(feature_router, dependencies=[_require_active(feature.id)])

    loader.load()
    host.finish_loading(owner)
    loader.activate()
    return app
