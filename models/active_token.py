"""Active session token model."""

from datetime import datetime

from utils.clock import utcnow

from . import db


class ActiveToken(db.Model):
    """A session token issued to a user and not yet revoked."""

    __tablename__ = "active_tokens"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.String(32),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    jti = db.Column(db.String(64), unique=True, nullable=False)
    issued_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)

    user = db.relationship("User", back_populates="active_tokens")

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or utcnow())
