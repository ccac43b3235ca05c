import os

os.environ.setdefault("APP_ENV", "test")

import pytest
from fastapi.testclient import TestClient

from users_api.config import Settings
from users_api.database import Database
from users_api.main import create_app
from users_api.repository import SqlUserRepository


# Every test gets its own SQLite file under pytest's tmp_path
@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'users_test.db'}",
        db_retries=1,
        db_retry_delay=0,
    )


@pytest.fixture
def database(settings):
    db = Database.from_settings(settings)
    db.migrate()
    yield db
    db.dispose()


@pytest.fixture
def repository(database):
    return SqlUserRepository(database.session_factory)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the client runs the lifespan, which builds the database and service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def db_session(client, app):
    session = app.state.database.session_factory()
    yield session
    session.close()


@pytest.fixture
def create_user(client):
    def _create(name="Ann", email="ann@example.com", age=20):
        response = client.post("/api/v1/users", json={"name": name, "email": email, "age": age})
        assert response.status_code == 201, response.text
        return response.json()

    return _create
