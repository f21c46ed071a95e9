import os

# Must be set before main is imported, it builds a default app at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.services.google_auth import GoogleTokenError
from main import create_app

MINT_A = "MintA" + "1" * 39
MINT_B = "MintB" + "2" * 39
MINT_C = "MintC" + "3" * 39


class FakeGoogleVerifier:
    """Accepts only credentials registered in self.tokens"""

    def __init__(self):
        self.tokens = {}
        self.calls = 0

    def verify(self, credential):
        self.calls += 1
        if credential not in self.tokens:
            raise GoogleTokenError("Wrong number of segments in token")
        return self.tokens[credential]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret",
        google_client_id="test-client.apps.googleusercontent.com",
        balance_poll_seconds=0.05,
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    application.state.google_verifier = FakeGoogleVerifier()
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(app, client):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def register(client):
    def _register(email="designer@example.com", username="designer", password="password123", role="designer"):
        response = client.post(
            "/api/register",
            json={"email": email, "username": username, "password": password, "role": role},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "user": body["user"],
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }
    return _register


@pytest.fixture
def designer(register):
    return register()


@pytest.fixture
def other_designer(register):
    return register(email="rival@example.com", username="rival")


@pytest.fixture
def collection(client, designer):
    response = client.post(
        "/api/collections",
        json={"name": "Summer Drop", "description": "Linen pieces", "collection_address": "Coll" + "9" * 40},
        headers=designer["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def product(client, designer, collection):
    response = client.post(
        "/api/products",
        json={
            "collection_id": collection["id"],
            "name": "Linen Shirt",
            "price": 79.5,
            "sizes": [{"label": "M", "quantity": 4}, {"label": "L", "quantity": 2}],
        },
        headers=designer["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()
