"""User model definition."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy.ext.mutable import MutableDict

from utils.clock import utcnow

from . import db


class Role(str, enum.Enum):
    """Closed set of account roles."""

    USER = "user"
    ADMIN = "admin"
    TEACHER = "teacher"

    @classmethod
    def parse(cls, value: object) -> "Role | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


DEFAULT_PREFERENCES = {"theme": "light", "font_size": 16, "language": "en-US"}


def _new_id() -> str:
    return uuid.uuid4().hex


def _default_preferences() -> dict:
    return dict(DEFAULT_PREFERENCES)


class User(db.Model):
    """Represents an EchoLearn account."""

    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_failed_login_locked", "failed_login_count", "locked_until"),
    )

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    role = db.Column(
        db.Enum(
            Role,
            name="user_role_enum",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=Role.USER,
    )
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.text("true"),
    )
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    email_verification_token = db.Column(db.String(64), nullable=True)
    failed_login_count = db.Column(db.Integer, nullable=False, default=0)
    locked_until = db.Column(db.DateTime, nullable=True)
    last_login_at = db.Column(db.DateTime, nullable=True)
    last_login_ip = db.Column(db.String(64), nullable=True)
    preferences = db.Column(
        MutableDict.as_mutable(db.JSON),
        nullable=False,
        default=_default_preferences,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    active_tokens = db.relationship(
        "ActiveToken",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def to_safe_dict(self) -> dict:
        """Serialize the user without credentials, tokens or lockout state."""

        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role.value if self.role else None,
            "is_active": self.is_active,
            "email_verified": self.email_verified,
            "last_login_at": self.last_login_at.isoformat()
            if self.last_login_at
            else None,
            "preferences": {**DEFAULT_PREFERENCES, **(self.preferences or {})},
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
