from __future__ import annotations


def test_health_ok(client) -> None:
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json() == {"ok": True}


def test_root_banner(client) -> None:
    res = client.get("/")
    assert res.status_code == 200
    assert res.text == "AUTO-GEN API running"


def test_metrics_exposed(client) -> None:
    client.get("/api/health")
    res = client.get("/metrics")
    assert res.status_code == 200
    assert "http_requests_total" in res.text


def test_app_module_exposes_relay_routes() -> None:
    from app.main import app

    paths = {getattr(route, "path", None) for route in app.routes}
    assert {"/", "/api/health", "/api/chat", "/api/recommend", "/api/audit"} <= paths
