"""Registration, login and session revocation."""

from __future__ import annotations

import logging

from models.user import User
from services.credential_store import CredentialStore
from services.lockout import LockoutPolicy
from services.token_registry import ActiveTokenRegistry
from services.tokens import IssuedToken, TokenService
from utils.clock import utcnow
from utils.errors import (
    AccountDeactivated,
    AccountLocked,
    InvalidCredentials,
    ValidationError,
)


class AuthService:
    """Ties the credential store, lockout policy and token components together."""

    def __init__(
        self,
        store: CredentialStore,
        lockout: LockoutPolicy,
        tokens: TokenService,
        registry: ActiveTokenRegistry,
        logger: logging.Logger | None = None,
    ):
        self.store = store
        self.lockout = lockout
        self.tokens = tokens
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)

    def _start_session(self, user: User) -> IssuedToken:
        issued = self.tokens.issue(user.id)
        self.registry.add(user, issued)
        return issued

    def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        ip_address: str | None = None,
    ) -> tuple[User, IssuedToken]:
        user = self.store.create(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            ip_address=ip_address,
        )
        issued = self._start_session(user)
        self.logger.info("New user registered: %s", user.id)
        return user, issued

    def login(
        self, email: str, password: str, ip_address: str | None = None
    ) -> tuple[User, IssuedToken]:
        user = self.store.find_by_email(email)
        if user is None:
            self.logger.warning("Login attempt with unknown email")
            raise InvalidCredentials()

        if self.lockout.is_locked(user):
            self.logger.warning("Login attempt on locked account %s", user.id)
            raise AccountLocked()

        if not user.is_active:
            self.logger.warning("Login attempt on inactive account %s", user.id)
            raise AccountDeactivated()

        if not self.store.hasher.verify(password, user.password_hash):
            self.lockout.record_failure(user)
            self.store.save(user)
            self.logger.warning(
                "Failed login attempt for %s (%d consecutive)",
                user.id,
                user.failed_login_count,
            )
            raise InvalidCredentials()

        self.lockout.record_success(user)
        user.last_login_at = utcnow()
        user.last_login_ip = ip_address
        self.store.save(user)

        issued = self._start_session(user)
        self.logger.info("Successful login for %s", user.id)
        return user, issued

    def logout(self, user: User, jti: str) -> None:
        self.registry.remove(user, jti)
        self.logger.info("User %s logged out", user.id)

    def logout_all(self, user: User) -> int:
        revoked = self.registry.clear(user)
        self.logger.info("User %s logged out from all devices", user.id)
        return revoked

    def change_password(
        self, user: User, current_password: str, new_password: str, *, keep_jti: str
    ) -> None:
        """Replace the password and revoke every other session of ``user``."""

        if not self.store.hasher.verify(current_password, user.password_hash):
            raise ValidationError(
                details=[
                    {
                        "field": "current_password",
                        "message": "Current password is incorrect",
                    }
                ]
            )
        self.store.update_password(user, new_password)
        self.registry.clear(user, keep=keep_jti)
        self.logger.info("Password changed for user %s", user.id)

    def set_active(self, user: User, is_active: bool) -> None:
        user.is_active = is_active
        self.store.save(user)
        if not is_active:
            self.registry.clear(user)
