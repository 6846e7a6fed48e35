"""Account lockout after repeated failed logins."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from models.user import User
from utils.clock import utcnow

MAX_ATTEMPTS = 5
LOCK_DURATION = timedelta(hours=2)


class LockoutPolicy:
    """Tracks consecutive login failures and temporarily locks accounts.

    The policy only mutates the user record; persisting it is the caller's job.
    """

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        lock_duration: timedelta = LOCK_DURATION,
        *,
        clock: Callable[[], datetime] = utcnow,
        logger: logging.Logger | None = None,
    ):
        self.max_attempts = max_attempts
        self.lock_duration = lock_duration
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def is_locked(self, user: User) -> bool:
        return user.locked_until is not None and user.locked_until > self.clock()

    def record_failure(self, user: User) -> None:
        """Count a failed attempt, locking the account at the threshold."""

        now = self.clock()
        if user.locked_until is not None and user.locked_until <= now:
            # Previous lock has run out: start a fresh series.
            user.locked_until = None
            user.failed_login_count = 1
            return

        user.failed_login_count = (user.failed_login_count or 0) + 1
        if user.failed_login_count >= self.max_attempts and not self.is_locked(user):
            user.locked_until = now + self.lock_duration
            self.logger.warning(
                "Account %s locked until %s after %d failed attempts",
                user.id,
                user.locked_until.isoformat(),
                user.failed_login_count,
            )

    def record_success(self, user: User) -> None:
        user.failed_login_count = 0
        user.locked_until = None
