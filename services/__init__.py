"""Authentication services wired onto the Flask application."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from models import db

from .auth import AuthService
from .credential_store import CredentialStore
from .lockout import LockoutPolicy
from .passwords import PasswordHasher
from .token_registry import ActiveTokenRegistry
from .tokens import IssuedToken, TokenService

EXTENSION_KEY = "echolearn.services"


@dataclass
class Services:
    hasher: PasswordHasher
    store: CredentialStore
    lockout: LockoutPolicy
    tokens: TokenService
    registry: ActiveTokenRegistry
    auth: AuthService


def init_services(app: Flask) -> Services:
    """Build the auth components once, each with its own child logger."""

    logger = app.logger
    hasher = PasswordHasher(
        rounds=app.config["BCRYPT_ROUNDS"],
        logger=logger.getChild("passwords"),
    )
    store = CredentialStore(db.session, hasher, logger=logger.getChild("store"))
    lockout = LockoutPolicy(
        max_attempts=app.config["LOCKOUT_MAX_ATTEMPTS"],
        lock_duration=app.config["LOCKOUT_DURATION"],
        logger=logger.getChild("lockout"),
    )
    tokens = TokenService(logger=logger.getChild("tokens"))
    registry = ActiveTokenRegistry(db.session, logger=logger.getChild("registry"))
    auth = AuthService(
        store, lockout, tokens, registry, logger=logger.getChild("auth")
    )

    services = Services(
        hasher=hasher,
        store=store,
        lockout=lockout,
        tokens=tokens,
        registry=registry,
        auth=auth,
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "ActiveTokenRegistry",
    "AuthService",
    "CredentialStore",
    "IssuedToken",
    "LockoutPolicy",
    "PasswordHasher",
    "Services",
    "TokenService",
    "get_services",
    "init_services",
]
