"""Tests for the health and error-shape behaviour of the HTTP layer."""

from fastapi.testclient import TestClient


class TestPing:
    def test_ping(self, client: TestClient):
        response = client.get("/ping")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"message": "pong"}


class TestReadiness:
    def test_ready_when_database_answers(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["database"] == "connected"
        assert "checked_out" in body["pool"]

    def test_unavailable_when_database_fails(self, client: TestClient, monkeypatch):
        database_service = client.app.state.app_dependencies.database_service
        monkeypatch.setattr(database_service, "health_check", lambda: False)

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json() == {"error": "database unavailable"}


class TestTransportErrors:
    def test_unknown_route_uses_error_shape(self, client: TestClient):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    def test_wrong_method_uses_error_shape(self, client: TestClient):
        response = client.patch("/users/1", json={})

        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/ping", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_is_generated(self, client: TestClient):
        response = client.get("/ping")

        assert response.headers["X-Request-ID"]

    def test_unexpected_exception_is_hidden(self, app, fake_repository, monkeypatch):
        from src.userapi.api.http.deps import get_user_repository

        def explode():
            raise RuntimeError("secret internals")

        monkeypatch.setattr(fake_repository, "list", explode)
        app.dependency_overrides[get_user_repository] = lambda: fake_repository

        with TestClient(app) as test_client:
            response = test_client.get("/users")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}
        assert "secret" not in response.text


class TestDocs:
    def test_openapi_lists_user_routes(self, client: TestClient):
        schema = client.get("/openapi.json").json()

        assert "/users" in schema["paths"]
        assert "/users/{user_id}" in schema["paths"]
        assert "/ping" in schema["paths"]
