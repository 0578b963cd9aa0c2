# tests/test_health.py
from http import HTTPStatus


def test_health_endpoint_ok(client):
    """
    /health responds with 200 OK and the expected JSON shape.
    """
    response = client.get("/health")

    assert response.status_code == HTTPStatus.OK
    data = response.json()

    assert data["status"] == "ok"
    assert isinstance(data["app_name"], str)
    assert data["environment"] == "test"
    assert data["store_backend"] == "sql"
    assert "timestamp_utc" in data


def test_health_does_not_require_identity(client):
    response = client.get("/health", headers={"X-User-Id": "nobody"})
    assert response.status_code == HTTPStatus.OK
