"""Durable storage and lookup of user records."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import scoped_session

from models.user import DEFAULT_PREFERENCES, Role, User
from services.passwords import PasswordHasher
from utils.errors import DuplicateEmail, ValidationError
from utils.request_validation import (
    email_error,
    known_preferences,
    name_error,
    normalize_email,
    password_error,
    preferences_errors,
)


def _validate_record(user: User) -> list[dict[str, str]]:
    errors = []
    message = email_error(user.email)
    if message:
        errors.append({"field": "email", "message": message})
    for field, label in (("first_name", "First name"), ("last_name", "Last name")):
        message = name_error(getattr(user, field), label)
        if message:
            errors.append({"field": field, "message": message})
    if Role.parse(user.role) is None:
        errors.append({"field": "role", "message": "Invalid role"})
    errors.extend(preferences_errors(user.preferences or {}))
    return errors


class CredentialStore:
    """Repository over the ``users`` table.

    Passwords are hashed here, explicitly, by ``create`` and
    ``update_password``; ``save`` never touches the hash.
    """

    def __init__(
        self,
        session: scoped_session,
        hasher: PasswordHasher,
        logger: logging.Logger | None = None,
    ):
        self.session = session
        self.hasher = hasher
        self.logger = logger or logging.getLogger(__name__)

    # Lookups -------------------------------------------------------------

    def find_by_email(self, email: str) -> User | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return (
            self.session.query(User)
            .filter(func.lower(User.email) == normalized)
            .first()
        )

    def get(self, user_id: str) -> User | None:
        if not user_id:
            return None
        return self.session.get(User, str(user_id))

    def count(self, *, active: bool | None = None) -> int:
        query = self.session.query(func.count(User.id))
        if active is not None:
            query = query.filter(User.is_active.is_(active))
        return query.scalar() or 0

    def count_by_role(self) -> dict[str, int]:
        counts = {role.value: 0 for role in Role}
        rows = self.session.query(User.role, func.count(User.id)).group_by(User.role)
        for role, total in rows:
            counts[Role(role).value] = total
        return counts

    def paginate(self, page: int, limit: int) -> tuple[list[User], int]:
        query = self.session.query(User)
        total = query.count()
        users = (
            query.order_by(User.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return users, total

    def search(self, term: str, page: int, limit: int) -> tuple[list[User], int]:
        escaped = (
            term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        pattern = f"%{escaped}%"
        query = self.session.query(User).filter(
            or_(
                func.lower(User.email).like(pattern, escape="\\"),
                func.lower(User.first_name).like(pattern, escape="\\"),
                func.lower(User.last_name).like(pattern, escape="\\"),
            )
        )
        total = query.count()
        users = (
            query.order_by(User.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return users, total

    # Mutations -----------------------------------------------------------

    def create(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Role = Role.USER,
        preferences: Mapping | None = None,
        ip_address: str | None = None,
    ) -> User:
        """Validate, hash and persist a new user."""

        user = User(
            email=normalize_email(email),
            first_name=first_name.strip() if isinstance(first_name, str) else first_name,
            last_name=last_name.strip() if isinstance(last_name, str) else last_name,
            role=role,
            preferences={**DEFAULT_PREFERENCES, **known_preferences(preferences or {})},
            last_login_ip=ip_address,
            email_verification_token=secrets.token_hex(32),
        )

        errors = _validate_record(user)
        message = password_error(password)
        if message:
            errors.append({"field": "password", "message": message})
        if errors:
            raise ValidationError(details=errors)

        if self.find_by_email(user.email) is not None:
            self.logger.info("Registration attempt with existing email")
            raise DuplicateEmail()

        user.password_hash = self.hasher.hash(password)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise DuplicateEmail() from None
        return user

    def save(self, user: User) -> User:
        """Re-validate and persist pending changes to ``user``."""

        errors = _validate_record(user)
        if errors:
            self.session.rollback()
            raise ValidationError(details=errors)
        self.session.commit()
        return user

    def update_password(self, user: User, new_password: str) -> User:
        message = password_error(new_password)
        if message:
            raise ValidationError(details=[{"field": "password", "message": message}])
        user.password_hash = self.hasher.hash(new_password)
        self.session.commit()
        return user
