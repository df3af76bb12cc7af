from fastapi.testclient import TestClient

from devkit.config import FinderSettings

from api.app import create_app
from api.dependencies import get_settings


def test_health_endpoint_response_shape() -> None:
    client = TestClient(create_app())
    response = client.get("/healthz")
    body = response.json()

    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["status"] == "ok"


def test_ready_endpoint_reports_missing_keys() -> None:
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: FinderSettings(
        PUBLIC_DATA_API_KEY="public", KAKAO_REST_API_KEY=None
    )
    client = TestClient(app)

    body = client.get("/readyz").json()

    assert body["success"] is True
    assert body["data"] == {"status": "degraded", "missing_keys": ["KAKAO_REST_API_KEY"]}


def test_ready_endpoint_when_keys_are_configured() -> None:
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: FinderSettings(
        PUBLIC_DATA_API_KEY="public", KAKAO_REST_API_KEY="kakao"
    )
    client = TestClient(app)

    body = client.get("/readyz").json()

    assert body["data"] == {"status": "ready", "missing_keys": []}
