"""Request-level authentication and authorization decorators."""

from __future__ import annotations

from functools import wraps
from typing import Callable

from flask import current_app, g, request

from models.user import Role, User
from services import get_services
from utils.errors import (
    AccountDeactivated,
    Forbidden,
    InvalidToken,
    TokenRevoked,
    Unauthenticated,
)


def bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def current_user() -> User | None:
    return g.get("current_user")


def authenticate_request() -> User:
    """Resolve the bearer token to an active user or raise a 401 error."""

    token = bearer_token()
    if token is None:
        current_app.logger.warning(
            "Authentication failed: no token provided - IP: %s", request.remote_addr
        )
        raise Unauthenticated()

    services = get_services()
    claims = services.tokens.verify(token)

    user = services.store.get(claims["sub"])
    if user is None:
        current_app.logger.warning(
            "Authentication failed: user %s not found", claims["sub"]
        )
        raise InvalidToken()

    if not user.is_active:
        current_app.logger.warning("Authentication failed: inactive user %s", user.id)
        raise AccountDeactivated()

    if not services.registry.contains(user, claims["jti"]):
        current_app.logger.warning("Authentication failed: revoked token for %s", user.id)
        raise TokenRevoked()

    g.current_user = user
    g.current_token = token
    g.token_claims = claims
    return user


def require_roles(*roles: Role) -> User:
    user = current_user()
    if user is None:
        raise Unauthenticated("Authentication required.")
    if user.role not in roles:
        current_app.logger.warning(
            "Role check failed: user %s has role %s, required: %s",
            user.id,
            user.role.value,
            ", ".join(role.value for role in roles),
        )
        raise Forbidden()
    return user


def token_required(view: Callable) -> Callable:
    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate_request()
        return view(*args, **kwargs)

    return wrapper


def optional_auth(view: Callable) -> Callable:
    """Attach the user when a valid token is sent; never fail the request."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if bearer_token() is not None:
            try:
                authenticate_request()
            except Exception:  # anonymous on any failure
                current_app.logger.debug("Optional authentication skipped", exc_info=True)
                g.pop("current_user", None)
                g.pop("current_token", None)
                g.pop("token_claims", None)
        return view(*args, **kwargs)

    return wrapper


def role_required(*roles: Role) -> Callable:
    """Allow the view only for the given roles. Apply under ``token_required``."""

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            require_roles(*roles)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def owner_or_admin(field: str = "user_id") -> Callable:
    """Allow admins, or the user whose id is given in the URL or JSON body."""

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                raise Unauthenticated("Authentication required.")

            owner_id = kwargs.get(field)
            if owner_id is None:
                body = request.get_json(silent=True)
                if isinstance(body, dict):
                    owner_id = body.get(field)

            if user.role is not Role.ADMIN and str(owner_id) != user.id:
                current_app.logger.warning(
                    "Ownership check failed: user %s accessing resource of %s",
                    user.id,
                    owner_id,
                )
                raise Forbidden("Access denied.")
            return view(*args, **kwargs)

        return wrapper

    return decorator
