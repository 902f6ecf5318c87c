"""Tests for the /users handlers against stand-in repositories."""

import inspect

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from src.userapi.api.http.routers.users import (
    create_user,
    delete_user,
    get_user,
    list_users,
    parse_user_id,
    path_user_id,
    update_user,
)
from src.userapi.core.exceptions import MalformedRequestError, StorageError
from src.userapi.entities.user import User
from tests.fixtures.dummies import FailingUserRepository, InMemoryUserRepository

VALID_USER = {
    "name": "John Doe",
    "age": 30,
    "phone_number": "+1234567890",
    "email": "john@example.com",
}


@pytest.fixture
def stored_user(fake_repository: InMemoryUserRepository) -> User:
    return fake_repository.create(User(**VALID_USER))


class TestParseUserId:
    @pytest.mark.parametrize(
        "raw, expected",
        [("1", 1), ("42", 42), ("+7", 7), ("-3", -3), ("9223372036854775807", 2**63 - 1)],
    )
    def test_accepts_integers(self, raw, expected):
        assert parse_user_id(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["abc", "", "1.5", "1_000", " 1", "0x10", "9223372036854775808", "١"]
    )
    def test_rejects_everything_else(self, raw):
        with pytest.raises(MalformedRequestError, match="Invalid user ID"):
            parse_user_id(raw)


class TestCreateUser:
    def test_valid_user(self, fake_client: TestClient, fake_repository):
        response = fake_client.post("/users", json=VALID_USER)

        assert response.status_code == 201
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"id": 1, **VALID_USER}
        assert 1 in fake_repository.users

    def test_invalid_email(self, fake_client: TestClient, fake_repository):
        response = fake_client.post(
            "/users", json={**VALID_USER, "email": "invalid-email"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "invalid email format: invalid-email"}
        assert fake_repository.users == {}

    def test_missing_fields_fail_validation(self, fake_client: TestClient):
        response = fake_client.post("/users", json={"age": 20})

        assert response.status_code == 400
        assert response.json() == {"error": "name is required"}

    def test_body_id_is_ignored(self, fake_client: TestClient):
        response = fake_client.post("/users", json={**VALID_USER, "id": 99})

        assert response.status_code == 201
        assert response.json()["id"] == 1

    @pytest.mark.parametrize(
        "body", ["{not json", "", "[]", '{"age": "thirty"}', '{"name": 5}']
    )
    def test_malformed_body(self, fake_client: TestClient, body):
        response = fake_client.post(
            "/users", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request payload: ")

    def test_storage_error_is_generic(self, failing_client: TestClient):
        response = failing_client.post("/users", json=VALID_USER)

        assert response.status_code == 500
        assert response.json() == {"error": "Error creating user"}
        assert "10.0.0.5" not in response.text

    def test_age_beyond_int64_is_a_decode_error(
        self, fake_client: TestClient, fake_repository
    ):
        response = fake_client.post("/users", json={**VALID_USER, "age": 10**20})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request payload: age")
        assert fake_repository.users == {}

    def test_null_field_reports_rule(self, fake_client: TestClient):
        response = fake_client.post(
            "/users", json={**VALID_USER, "phone_number": None}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "phone number is required"}


class TestGetUser:
    def test_existing_user(self, fake_client: TestClient, stored_user: User):
        response = fake_client.get(f"/users/{stored_user.id}")

        assert response.status_code == 200
        assert response.json() == {"id": stored_user.id, **VALID_USER}

    def test_missing_user(self, fake_client: TestClient):
        response = fake_client.get("/users/999")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_invalid_id(self, fake_client: TestClient):
        response = fake_client.get("/users/abc")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid user ID"}

    def test_storage_error(self, failing_client: TestClient):
        response = failing_client.get("/users/1")

        assert response.status_code == 500
        assert response.json() == {"error": "Error retrieving user"}


class TestUpdateUser:
    def test_updates_user(self, fake_client: TestClient, stored_user: User, fake_repository):
        changes = {**VALID_USER, "name": "Jane Doe", "email": "jane@example.com"}

        response = fake_client.put(f"/users/{stored_user.id}", json=changes)

        assert response.status_code == 200
        assert response.json() == {"id": stored_user.id, **changes}
        assert fake_repository.users[stored_user.id].name == "Jane Doe"

    def test_path_id_wins_over_body_id(
        self, fake_client: TestClient, stored_user: User, fake_repository
    ):
        response = fake_client.put(
            f"/users/{stored_user.id}", json={**VALID_USER, "id": 555, "age": 50}
        )

        assert response.status_code == 200
        assert response.json()["id"] == stored_user.id
        assert 555 not in fake_repository.users
        assert fake_repository.users[stored_user.id].age == 50

    def test_missing_user(self, fake_client: TestClient):
        response = fake_client.put("/users/999", json=VALID_USER)

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_invalid_id(self, fake_client: TestClient):
        response = fake_client.put("/users/abc", json=VALID_USER)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid user ID"}

    def test_invalid_id_checked_before_body(self, fake_client: TestClient):
        response = fake_client.put(
            "/users/abc", content="{", headers={"Content-Type": "application/json"}
        )

        assert response.json() == {"error": "Invalid user ID"}

    def test_malformed_body(self, fake_client: TestClient, stored_user: User):
        response = fake_client.put(
            f"/users/{stored_user.id}",
            content="{",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request payload")

    def test_validation_failure(self, fake_client: TestClient, stored_user: User):
        response = fake_client.put(
            f"/users/{stored_user.id}", json={**VALID_USER, "age": 0}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "age must be positive, got: 0"}

    def test_age_beyond_int64_is_a_decode_error(
        self, fake_client: TestClient, stored_user: User, fake_repository
    ):
        response = fake_client.put(
            f"/users/{stored_user.id}", json={**VALID_USER, "age": 10**20}
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request payload: age")
        assert fake_repository.users[stored_user.id].age == VALID_USER["age"]

    def test_storage_error(self, failing_client: TestClient):
        response = failing_client.put("/users/1", json=VALID_USER)

        assert response.status_code == 500
        assert response.json() == {"error": "Error updating user"}


class TestDeleteUser:
    def test_deletes_user(self, fake_client: TestClient, stored_user: User, fake_repository):
        response = fake_client.delete(f"/users/{stored_user.id}")

        assert response.status_code == 204
        assert response.content == b""
        assert fake_repository.users == {}

    def test_missing_user(self, fake_client: TestClient):
        response = fake_client.delete("/users/999")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_invalid_id(self, fake_client: TestClient):
        response = fake_client.delete("/users/abc")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid user ID"}

    def test_storage_error(self, failing_client: TestClient):
        response = failing_client.delete("/users/1")

        assert response.status_code == 500
        assert response.json() == {"error": "Error deleting user"}


class TestListUsers:
    def test_empty(self, fake_client: TestClient):
        response = fake_client.get("/users")

        assert response.status_code == 200
        assert response.json() == []

    def test_lists_users(self, fake_client: TestClient, stored_user: User):
        response = fake_client.get("/users")

        assert response.status_code == 200
        assert response.json() == [{"id": stored_user.id, **VALID_USER}]

    def test_storage_error(self, failing_client: TestClient):
        response = failing_client.get("/users")

        assert response.status_code == 500
        assert response.json() == {"error": "Error retrieving users"}


class TestHandlerFunctions:
    """Handlers are plain functions that raise HTTPException on failure."""

    def test_missing_user_raises_404(self, fake_repository):
        with pytest.raises(HTTPException) as exc_info:
            get_user(user_id=999, repository=fake_repository)

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "User not found"

    def test_storage_error_raises_500_with_cause(self):
        with pytest.raises(HTTPException) as exc_info:
            list_users(repository=FailingUserRepository())

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Error retrieving users"
        assert isinstance(exc_info.value.__cause__, StorageError)

    def test_validation_error_raises_400(self, fake_repository):
        with pytest.raises(HTTPException) as exc_info:
            create_user(user=User(name="Jane"), repository=fake_repository)

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "age must be positive, got: 0"

    def test_path_id_dependency(self):
        assert path_user_id("42") == 42

        with pytest.raises(HTTPException) as exc_info:
            path_user_id("abc")
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(
        "endpoint", [create_user, get_user, update_user, delete_user, list_users]
    )
    def test_endpoints_are_synchronous(self, endpoint):
        assert not inspect.iscoroutinefunction(endpoint)
