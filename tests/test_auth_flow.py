"""Tests covering registration, login, lockout and session revocation."""

from __future__ import annotations

from datetime import timedelta

import pytest
from flask.testing import FlaskClient

from conftest import DEFAULT_PASSWORD, auth_headers
from models import db
from models.user import User
from utils.clock import utcnow

SAFE_VIEW_FORBIDDEN_KEYS = {
    "password",
    "password_hash",
    "email_verification_token",
    "active_tokens",
    "failed_login_count",
    "locked_until",
    "last_login_ip",
}


def _register(client: FlaskClient, email: str = "alice@example.com", **overrides):
    payload = {
        "email": email,
        "password": DEFAULT_PASSWORD,
        "confirm_password": DEFAULT_PASSWORD,
        "first_name": "Alice",
        "last_name": "Liddell",
    }
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


def test_register_returns_user_and_token(client: FlaskClient, app):
    response = _register(client)

    assert response.status_code == 201
    data = response.get_json()
    assert data["token"]
    assert data["user"]["email"] == "alice@example.com"
    assert data["user"]["role"] == "user"
    assert data["user"]["preferences"] == {
        "theme": "light",
        "font_size": 16,
        "language": "en-US",
    }
    assert not SAFE_VIEW_FORBIDDEN_KEYS & set(data["user"])

    with app.app_context():
        user = User.query.filter_by(email="alice@example.com").one()
        assert user.password_hash != DEFAULT_PASSWORD
        assert len(user.active_tokens) == 1


def test_register_rejects_duplicate_email(client: FlaskClient):
    assert _register(client).status_code == 201

    response = _register(client, email="ALICE@example.com")

    assert response.status_code == 400
    assert response.get_json()["code"] == "duplicate_email"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"email": "nope"}, "email"),
        ({"password": "abc", "confirm_password": "abc"}, "password"),
        ({"confirm_password": "Different1!"}, "confirm_password"),
        ({"first_name": ""}, "first_name"),
    ],
)
def test_register_validation(client: FlaskClient, overrides, field):
    response = _register(client, **overrides)

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["code"] == "validation_error"
    assert field in {detail["field"] for detail in payload["details"]}


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"email": "alice@example.com"}, 400),
        ({"password": DEFAULT_PASSWORD}, 400),
        ({"email": "alice@example.com", "password": "Wrong123!"}, 401),
        ({"email": "nobody@example.com", "password": DEFAULT_PASSWORD}, 401),
    ],
)
def test_login_validation(client: FlaskClient, make_user, payload, status_code):
    """Login endpoint should validate request bodies and credentials."""

    make_user("alice@example.com")

    response = client.post("/auth/login", json=payload)

    assert response.status_code == status_code


def test_login_records_audit_fields(client: FlaskClient, app, make_user):
    user_id = make_user("alice@example.com")

    response = client.post(
        "/auth/login",
        json={"email": "Alice@Example.com", "password": DEFAULT_PASSWORD},
        environ_base={"REMOTE_ADDR": "10.0.0.7"},
    )

    assert response.status_code == 200
    assert response.get_json()["user"]["last_login_at"]
    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.last_login_ip == "10.0.0.7"
        assert user.last_login_at is not None


def test_two_sessions_and_single_logout(client: FlaskClient):
    """Logging out one device leaves the other session intact."""

    register_response = _register(client)
    token_a = register_response.get_json()["token"]

    login_response = client.post(
        "/auth/login",
        json={"email": "alice@example.com", "password": DEFAULT_PASSWORD},
    )
    assert login_response.status_code == 200
    token_b = login_response.get_json()["token"]
    assert token_a != token_b

    assert client.get("/auth/profile", headers=auth_headers(token_a)).status_code == 200
    assert client.get("/auth/profile", headers=auth_headers(token_b)).status_code == 200

    assert client.post("/auth/logout", headers=auth_headers(token_a)).status_code == 200

    revoked = client.get("/auth/profile", headers=auth_headers(token_a))
    assert revoked.status_code == 401
    assert revoked.get_json()["code"] == "token_revoked"
    assert client.get("/auth/profile", headers=auth_headers(token_b)).status_code == 200


def test_logout_all_revokes_every_token(client: FlaskClient, make_user, login):
    make_user("alice@example.com")
    tokens = [login("alice@example.com") for _ in range(3)]

    response = client.post("/auth/logout-all", headers=auth_headers(tokens[0]))
    assert response.status_code == 200

    for token in tokens:
        follow_up = client.get("/auth/verify", headers=auth_headers(token))
        assert follow_up.status_code == 401


def test_lockout_after_five_failures(client: FlaskClient, app, make_user):
    user_id = make_user("bob@example.com")

    for _ in range(5):
        response = client.post(
            "/auth/login", json={"email": "bob@example.com", "password": "Wrong123!"}
        )
        assert response.status_code == 401

    locked = client.post(
        "/auth/login", json={"email": "bob@example.com", "password": DEFAULT_PASSWORD}
    )
    assert locked.status_code == 423
    assert locked.get_json()["code"] == "account_locked"

    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.failed_login_count == 5
        user.locked_until = utcnow() - timedelta(seconds=1)
        db.session.commit()

    unlocked = client.post(
        "/auth/login", json={"email": "bob@example.com", "password": DEFAULT_PASSWORD}
    )
    assert unlocked.status_code == 200

    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.failed_login_count == 0
        assert user.locked_until is None


def test_deactivated_account_cannot_log_in(client: FlaskClient, app, make_user):
    user_id = make_user("carol@example.com")
    with app.app_context():
        db.session.get(User, user_id).is_active = False
        db.session.commit()

    response = client.post(
        "/auth/login", json={"email": "carol@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 401
    assert response.get_json()["code"] == "account_deactivated"


def test_profile_update_merges_preferences(client: FlaskClient, make_user, login):
    make_user("alice@example.com")
    token = login("alice@example.com")

    response = client.put(
        "/auth/profile",
        json={"first_name": "  Alicia ", "preferences": {"theme": "cream", "font_size": 20}},
        headers=auth_headers(token),
    )

    assert response.status_code == 200
    user = response.get_json()["user"]
    assert user["first_name"] == "Alicia"
    assert user["preferences"] == {"theme": "cream", "font_size": 20, "language": "en-US"}

    fetched = client.get("/auth/profile", headers=auth_headers(token)).get_json()["user"]
    assert fetched["preferences"]["theme"] == "cream"


@pytest.mark.parametrize(
    "payload",
    [
        {"preferences": {"theme": "neon"}},
        {"preferences": {"font_size": 30}},
        {"preferences": {"language": "fr-FR"}},
        {"last_name": ""},
    ],
)
def test_profile_update_validation(client: FlaskClient, make_user, login, payload):
    make_user("alice@example.com")
    token = login("alice@example.com")

    response = client.put("/auth/profile", json=payload, headers=auth_headers(token))

    assert response.status_code == 400
    assert response.get_json()["code"] == "validation_error"


def test_change_password_keeps_current_session_only(client: FlaskClient, make_user, login):
    make_user("alice@example.com")
    current = login("alice@example.com")
    other = login("alice@example.com")

    wrong = client.put(
        "/auth/password",
        json={"current_password": "Nope1234!", "new_password": "Better456?"},
        headers=auth_headers(current),
    )
    assert wrong.status_code == 400

    response = client.put(
        "/auth/password",
        json={"current_password": DEFAULT_PASSWORD, "new_password": "Better456?"},
        headers=auth_headers(current),
    )
    assert response.status_code == 200

    assert client.get("/auth/verify", headers=auth_headers(current)).status_code == 200
    assert client.get("/auth/verify", headers=auth_headers(other)).status_code == 401
    login("alice@example.com", "Better456?")


def test_verify_reports_valid_token(client: FlaskClient, make_user, login):
    make_user("alice@example.com")
    token = login("alice@example.com")

    response = client.get("/auth/verify", headers=auth_headers(token))

    assert response.status_code == 200
    assert response.get_json()["valid"] is True
    assert response.get_json()["user"]["email"] == "alice@example.com"


def test_missing_token_is_unauthenticated(client: FlaskClient):
    response = client.get("/auth/profile")

    assert response.status_code == 401
    assert response.get_json()["code"] == "unauthenticated"


def test_garbage_token_is_invalid(client: FlaskClient):
    response = client.get("/auth/profile", headers=auth_headers("not.a.token"))

    assert response.status_code == 401
    assert response.get_json()["code"] == "invalid_token"


def test_change_password_with_non_string_current_password(client: FlaskClient, make_user, login):
    make_user("alice@example.com")
    token = login("alice@example.com")

    response = client.put(
        "/auth/password",
        json={"current_password": 12345678, "new_password": "Xyz12345!"},
        headers=auth_headers(token),
    )

    assert response.status_code == 400
    assert response.get_json()["code"] == "validation_error"
    assert client.get("/auth/verify", headers=auth_headers(token)).status_code == 200


def test_profile_update_drops_unknown_preferences(client: FlaskClient, make_user, login):
    make_user("alice@example.com")
    token = login("alice@example.com")

    response = client.put(
        "/auth/profile",
        json={"preferences": {"theme": "blue", "sparkles": True}},
        headers=auth_headers(token),
    )

    assert response.status_code == 200
    assert response.get_json()["user"]["preferences"] == {
        "theme": "blue",
        "font_size": 16,
        "language": "en-US",
    }
