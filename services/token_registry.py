"""Server-side registry of live session tokens."""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import scoped_session

from models.active_token import ActiveToken
from models.user import User
from services.tokens import IssuedToken
from utils.clock import utcnow


class ActiveTokenRegistry:
    """Records which issued tokens each user may still present."""

    def __init__(
        self,
        session: scoped_session,
        *,
        clock: Callable = utcnow,
        logger: logging.Logger | None = None,
    ):
        self.session = session
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def add(self, user: User, issued: IssuedToken) -> None:
        now = self.clock()
        # Drop entries whose tokens can no longer verify anyway.
        for entry in list(user.active_tokens):
            if entry.is_expired(now):
                user.active_tokens.remove(entry)
        user.active_tokens.append(
            ActiveToken(
                jti=issued.jti,
                issued_at=issued.issued_at,
                expires_at=issued.expires_at,
            )
        )
        self.session.commit()

    def remove(self, user: User, jti: str) -> bool:
        """Revoke a single token; return whether it was registered."""

        for entry in list(user.active_tokens):
            if entry.jti == jti:
                user.active_tokens.remove(entry)
                self.session.commit()
                return True
        return False

    def clear(self, user: User, *, keep: str | None = None) -> int:
        """Revoke every token of ``user`` except ``keep``; return the count."""

        revoked = [entry for entry in user.active_tokens if entry.jti != keep]
        for entry in revoked:
            user.active_tokens.remove(entry)
        self.session.commit()
        if revoked:
            self.logger.info("Revoked %d token(s) for user %s", len(revoked), user.id)
        return len(revoked)

    def contains(self, user: User, jti: str) -> bool:
        now = self.clock()
        return any(
            entry.jti == jti and not entry.is_expired(now)
            for entry in user.active_tokens
        )
