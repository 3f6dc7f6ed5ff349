from __future__ import annotations

from fastapi.testclient import TestClient

import features.diagnostics as diagnostics
from featurehost.app import create_app


def _client(monkeypatch, **env: str) -> TestClient:
    for name in ("FH_USE", "FH_ENABLED_FEATURE_GROUPS", "FH_OWNER", "FH_DEV_MODE"):
        monkeypatch.delenv(name, raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    return TestClient(create_app())


def _active(client: TestClient) -> set[str]:
    body = client.get("/features").json()
    return {f["id"] for f in body["features"] if f["active"]}


def test_default_config_enables_everything_but_samples(monkeypatch) -> None:
    client = _client(monkeypatch)
    body = client.get("/features").json()

    assert body["state"] == "activated"
    assert body["features"][0]["id"] == "repo_provider"
    assert _active(client) == {"repo_provider", "status_bar", "diagnostics", "outline_preview"}
    assert client.get("/sample/ping").status_code == 404
    assert client.get("/outline/ping").status_code == 200
    assert client.app.state.feature_host.experimental == {"outline_preview"}


def test_rules_toggle_feature_routes(monkeypatch) -> None:
    client = _client(monkeypatch)

    resp = client.put("/features/rules", json={"rules": {"sample_feature": "always", "diagnostics": "never"}})
    assert resp.status_code == 200
    assert "sample_feature" in resp.json()["active"]
    assert "diagnostics" not in resp.json()["active"]

    assert client.get("/sample/ping").status_code == 200
    assert client.get("/diagnostics").status_code == 404


def test_rules_reject_unknown_features_and_values(monkeypatch) -> None:
    client = _client(monkeypatch)
    assert client.put("/features/rules", json={"rules": {"ghost": "always"}}).status_code == 422
    assert client.put("/features/rules", json={"rules": {"status_bar": "sometimes"}}).status_code == 422


def test_group_selection_keeps_required_features(monkeypatch) -> None:
    client = _client(monkeypatch)

    resp = client.put("/features/groups", json={"groups": ["core"]})
    assert resp.status_code == 200
    assert set(resp.json()["active"]) == {"repo_provider", "status_bar", "diagnostics"}
    assert client.get("/outline/ping").status_code == 404

    resp = client.put("/features/groups", json={"groups": []})
    assert resp.json()["active"] == ["repo_provider"]

    resp = client.put("/features/groups", json={"groups": None})
    assert "outline_preview" in resp.json()["active"]


def test_env_seeds_rules_and_groups(monkeypatch) -> None:
    client = _client(
        monkeypatch,
        FH_USE='{"repo_provider": "never", "sample_feature": "always"}',
        FH_ENABLED_FEATURE_GROUPS="preview",
    )
    assert _active(client) == {"repo_provider", "outline_preview", "sample_feature"}


def test_schema_endpoint_and_dev_mode(monkeypatch) -> None:
    client = _client(monkeypatch, FH_DEV_MODE="1", FH_OWNER="acme")
    schema = client.get("/features/schema").json()

    assert schema["use"]["properties"]["sample_feature"]["default"] == "never"
    assert "**Provides:** _repository-provider_" in schema["use"]["properties"]["repo_provider"]["description"]
    assert schema["diagnostics"]["properties"]["max_reports"]["title"] == "Maximum reports"
    assert "status_bar" not in schema
    assert client.app.state.feature_loader.use_key_path == "acme.use"


def test_state_survives_toggle_via_serialization(monkeypatch) -> None:
    client = _client(monkeypatch)
    client.post("/diagnostics", json={"source": "lint", "message": "unused import"})

    resp = client.post("/features/serialize")
    assert resp.status_code == 200
    assert "diagnostics" in resp.json()["serialized"]

    client.put("/features/rules", json={"rules": {"diagnostics": "never"}})
    client.put("/features/rules", json={"rules": {}})

    reports = client.get("/diagnostics").json()["reports"]
    assert reports[-1]["message"] == "unused import"


def test_shutdown_deactivates_features(monkeypatch) -> None:
    for name in ("FH_USE", "FH_ENABLED_FEATURE_GROUPS", "FH_OWNER", "FH_DEV_MODE"):
        monkeypatch.delenv(name, raising=False)
    app = create_app()
    with TestClient(app) as client:
        assert client.get("/").json() == {"ok": True}

    assert app.state.feature_loader.state.value == "deactivated"
    assert not app.state.feature_host.is_currently_active("status_bar")


def test_repo_lookup_restores_saved_repositories(monkeypatch) -> None:
    client = _client(monkeypatch)
    host = client.app.state.feature_host
    host.saved_state["repo_provider"] = {"repositories": {"/src/app": "app"}}

    assert client.get("/repo/lookup", params={"path": "/src/app/main.py"}).json()["repository"] is None

    host.request_deactivate("repo_provider", suppress_serialization=True)
    host.request_activate("repo_provider")
    body = client.get("/repo/lookup", params={"path": "/src/app/main.py"}).json()
    assert body["repository"] == "app"


def test_toggling_a_feature_off_does_not_serialize_it(monkeypatch) -> None:
    client = _client(monkeypatch)
    host = client.app.state.feature_host
    client.post("/diagnostics", json={"source": "lint", "message": "unused import"})

    resp = client.put("/features/rules", json={"rules": {"diagnostics": "never"}})

    assert "diagnostics" not in resp.json()["active"]
    assert not host.is_currently_active("diagnostics")
    assert "diagnostics" not in host.saved_state


def test_diagnostics_keeps_only_newest_reports(monkeypatch) -> None:
    client = _client(monkeypatch)
    monkeypatch.setitem(diagnostics.FEATURE["config"]["max_reports"], "default", 2)

    for n in range(3):
        client.post("/diagnostics", json={"source": "lint", "message": f"m{n}"})

    reports = client.get("/diagnostics").json()["reports"]
    assert [r["message"] for r in reports] == ["m1", "m2"]


def test_app_lifespan_can_be_entered_twice(monkeypatch) -> None:
    for name in ("FH_USE", "FH_ENABLED_FEATURE_GROUPS", "FH_OWNER", "FH_DEV_MODE"):
        monkeypatch.delenv(name, raising=False)
    app = create_app()
    with TestClient(app):
        pass
    with TestClient(app) as client:
        assert client.get("/").json() == {"ok": True}

    assert app.state.feature_loader.state.value == "deactivated"
