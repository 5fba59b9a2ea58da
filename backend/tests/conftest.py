import os

# Module-level settings are read on import; keep them off any real database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from users_api.core.config import Settings
from users_api.core.database import Database
from users_api.core.security import CredentialService
from users_api.main import create_app

TEST_PASSWORD = "s3cret-pass"


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        BCRYPT_ROUNDS=4,  # bcrypt minimum, keeps the suite fast
        PROTECT_USER_ROUTES=True,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def client(settings):
    # Entering the context runs the lifespan, which creates the tables
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def credentials(settings):
    return CredentialService(settings)


@pytest.fixture
def db_session():
    database = Database("sqlite://")
    database.create_all()
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()
        database.dispose()


def create_user(client, **overrides):
    body = {
        "name": "Alice",
        "salary": 50000,
        "status": True,
        "password": TEST_PASSWORD,
        "Location": [
            {"country": "NL", "district": "Noord", "street": "Dam 1"},
            {"country": "BE", "district": "Antwerpen", "street": "Meir 2"},
        ],
    }
    body.update(overrides)
    response = client.post("/api/users", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def login(client, name="Alice", password=TEST_PASSWORD):
    return client.post("/api/auth/login", json={"name": name, "password": password})


@pytest.fixture
def auth_headers(client):
    create_user(client, name="Admin", Location=[])
    token = login(client, name="Admin").json()["token"]
    return {"Authorization": f"Bearer {token}"}
