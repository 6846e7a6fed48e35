"""Issuing and verifying signed session tokens."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from utils.errors import ExpiredToken, InvalidToken


@dataclass(frozen=True)
class IssuedToken:
    """A freshly minted token and the claims the registry needs."""

    token: str
    jti: str
    user_id: str
    issued_at: datetime
    expires_at: datetime


def _from_timestamp(value: int | float) -> datetime:
    return datetime.fromtimestamp(value, UTC).replace(tzinfo=None)


class TokenService:
    """Mints and validates bearer tokens.

    Signing key, issuer, audience and default lifetime come from the
    Flask-JWT-Extended settings of the current application.
    """

    def __init__(self, lifetime: timedelta | None = None, logger: logging.Logger | None = None):
        self.lifetime = lifetime
        self.logger = logger or logging.getLogger(__name__)

    def issue(self, user_id: str, *, lifetime: timedelta | None = None) -> IssuedToken:
        token = create_access_token(
            identity=str(user_id),
            expires_delta=lifetime or self.lifetime,
        )
        claims = decode_token(token, allow_expired=True)
        return IssuedToken(
            token=token,
            jti=claims["jti"],
            user_id=str(user_id),
            issued_at=_from_timestamp(claims["iat"]),
            expires_at=_from_timestamp(claims["exp"]),
        )

    def verify(self, token: str) -> dict:
        """Return the decoded claims of ``token`` or raise a 401 error."""

        try:
            claims = decode_token(token)
        except jwt.ExpiredSignatureError:
            raise ExpiredToken() from None
        except (jwt.InvalidTokenError, JWTExtendedException) as exc:
            self.logger.info("Rejected token: %s", exc)
            raise InvalidToken() from None

        if claims.get("type") != "access" or not claims.get("sub") or not claims.get("jti"):
            raise InvalidToken()
        return claims
