"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.user import Role  # noqa: E402
from services import get_services  # noqa: E402

DEFAULT_PASSWORD = "Abc12345!"


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-signing-secret-with-enough-length"
    BCRYPT_ROUNDS = 4
    EXPOSE_ERROR_DETAILS = False
    CORS_ORIGINS = "*"
    RATELIMIT_ENABLED = False
    RATE_LIMIT = "1000 per minute"
    LOGIN_RATE_LIMIT = "1000 per minute"
    REGISTER_RATE_LIMIT = "1000 per minute"
    AI_RATE_LIMIT = "1000 per minute"
    GEMINI_API_KEY = None


def build_app(**overrides) -> Flask:
    """Create an app from the test config with selected settings replaced."""

    class TestConfig(_BaseTestConfig):
        pass

    for key, value in overrides.items():
        setattr(TestConfig, key, value)

    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
    return application


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = build_app()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def make_user(app: Flask) -> Callable[..., str]:
    """Persist a user through the credential store and return its id."""

    counter = {"n": 0}

    def _make(
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        role: Role = Role.USER,
        **fields,
    ) -> str:
        counter["n"] += 1
        with app.app_context():
            user = get_services().store.create(
                email=email or f"user{counter['n']}@example.com",
                password=password,
                first_name=fields.pop("first_name", "Test"),
                last_name=fields.pop("last_name", f"User{counter['n']}"),
                role=role,
                **fields,
            )
            return user.id

    return _make


@pytest.fixture()
def login(client: FlaskClient) -> Callable[[str, str], str]:
    """Log in over HTTP and return the bearer token."""

    def _login(email: str, password: str = DEFAULT_PASSWORD) -> str:
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.get_json()
        return response.get_json()["token"]

    return _login


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
