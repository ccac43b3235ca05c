# tests/test_handler_errors.py
"""Tests for mapping service failures to HTTP responses"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from users_api.errors import EmailConflictError, UserNotFoundError
from users_api.handlers import get_user_service
from users_api.service import UserService

USERS = "/api/v1/users"


@pytest.fixture
def fake_service(app, client):
    service = MagicMock(spec=UserService)
    app.dependency_overrides[get_user_service] = lambda: service
    return service


def test_not_found_maps_to_404(client, fake_service):
    fake_service.get_user_by_id.side_effect = UserNotFoundError(5)

    response = client.get(f"{USERS}/5")

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}
    fake_service.get_user_by_id.assert_called_once_with(5)


def test_conflict_maps_to_409(client, fake_service):
    fake_service.create_user.side_effect = EmailConflictError("ann@example.com")

    response = client.post(USERS, json={"name": "Ann", "email": "ann@example.com"})

    assert response.status_code == 409
    assert response.json() == {"error": "Email already exists"}


def test_unexpected_error_maps_to_500(client, fake_service):
    fake_service.get_all_users.side_effect = RuntimeError("boom")

    response = client.get(USERS)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_database_error_maps_to_500(client, fake_service):
    fake_service.delete_user.side_effect = OperationalError("DELETE", {}, Exception("db down"))

    response = client.delete(f"{USERS}/1")

    assert response.status_code == 500
    assert "error" in response.json()


def test_invalid_body_never_reaches_service(client, fake_service):
    response = client.post(USERS, json={"name": "Ann", "email": "nope"})

    assert response.status_code == 400
    fake_service.create_user.assert_not_called()


def test_invalid_id_never_reaches_service(client, fake_service):
    response = client.put(f"{USERS}/abc", json={"name": "Ann"})

    assert response.status_code == 400
    fake_service.update_user.assert_not_called()


def test_delete_confirmation(client, fake_service):
    response = client.delete(f"{USERS}/3")

    assert response.status_code == 200
    assert response.json() == {"message": "User deleted successfully"}
    fake_service.delete_user.assert_called_once_with(3)


def test_oversized_values_never_reach_service(client, fake_service):
    assert client.get(f"{USERS}/{2**64}").status_code == 400
    assert client.put(f"{USERS}/1", json={"age": 10**20}).status_code == 400

    fake_service.get_user_by_id.assert_not_called()
    fake_service.update_user.assert_not_called()
