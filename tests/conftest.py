"""
Shared fixtures.

Every test gets a fresh app bound to its own in-memory SQLite database
(TestingConfig.DATABASE_URL = "sqlite://"); create_app() rebinds the global
DBStorage, so no state leaks between tests.
"""
from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

import pytest

from api import create_app
from models import storage


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    storage.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


def register(client, username="alice", email="alice@example.com", password="S3cret!pass"):
    return client.post(
        "/register",
        json={"username": username, "email": email, "password": password},
    )


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_tokens(client):
    """Registered user 'alice'; returns the register response body."""
    resp = register(client)
    assert resp.status_code == 201
    return resp.get_json()
