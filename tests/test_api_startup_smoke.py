from fastapi.testclient import TestClient


REQUIRED_ROUTES = {
    "/health",
    "/api/pricing/discounts/validate",
    "/api/pricing/discounts/preview",
    "/api/pricing/cart/totals",
    "/api/orders/quote",
    "/api/orders/statuses",
    "/api/orders/board/{role}",
    "/api/orders/status-change",
    "/internal/metrics",
}


def test_api_startup_and_router_registration(monkeypatch):
    from orderdesk import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        response = client.get("/")
        docs_response = client.get("/docs")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert docs_response.status_code == 200
    assert openapi_response.status_code == 200

    paths = {route.path for route in main.app.routes}
    assert REQUIRED_ROUTES.issubset(paths)


def test_startup_runs_settings_checks():
    from orderdesk import main

    with TestClient(main.app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["uptime_seconds"] >= 0
