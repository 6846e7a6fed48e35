"""Tests for token issuing and verification."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from services import get_services
from utils.errors import ExpiredToken, InvalidToken


def test_issued_token_carries_identity_issuer_and_audience(app):
    with app.app_context():
        tokens = get_services().tokens
        issued = tokens.issue("abc123")

        claims = tokens.verify(issued.token)

        assert claims["sub"] == "abc123"
        assert claims["jti"] == issued.jti
        assert claims["iss"] == "echolearn-api"
        assert claims["aud"] == "echolearn-client"
        lifetime = issued.expires_at - issued.issued_at
        assert lifetime == timedelta(days=7)


def test_expired_token_is_rejected(app):
    with app.app_context():
        tokens = get_services().tokens
        issued = tokens.issue("abc123", lifetime=timedelta(seconds=-5))

        with pytest.raises(ExpiredToken):
            tokens.verify(issued.token)


@pytest.mark.parametrize("token", ["garbage", "a.b.c", ""])
def test_malformed_token_is_rejected(app, token):
    with app.app_context():
        with pytest.raises(InvalidToken):
            get_services().tokens.verify(token)


def test_token_signed_with_other_key_is_rejected(app):
    with app.app_context():
        issued = get_services().tokens.issue("abc123")
        claims = jwt.decode(
            issued.token,
            options={"verify_signature": False},
        )
        forged = jwt.encode(claims, "another-secret-key-of-sufficient-size", algorithm="HS256")

        with pytest.raises(InvalidToken):
            get_services().tokens.verify(forged)


def test_token_for_other_audience_is_rejected(app):
    with app.app_context():
        issued = get_services().tokens.issue("abc123")
        claims = jwt.decode(issued.token, options={"verify_signature": False})
        claims["aud"] = "someone-else"
        forged = jwt.encode(
            claims, app.config["JWT_SECRET_KEY"], algorithm="HS256"
        )

        with pytest.raises(InvalidToken):
            get_services().tokens.verify(forged)
