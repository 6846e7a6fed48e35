"""Password hashing with bcrypt."""

from __future__ import annotations

import logging

import bcrypt

BCRYPT_ROUNDS = 12
# bcrypt ignores everything after the first 72 bytes of the secret.
_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted one-way hashing and verification of plaintext passwords."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS, logger: logging.Logger | None = None):
        self.rounds = rounds
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _encode(plaintext: str) -> bytes:
        return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def hash(self, plaintext: str) -> str:
        """Return a bcrypt hash of ``plaintext`` using a fresh random salt."""

        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(plaintext), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """Return whether ``plaintext`` matches ``hashed``; never raises."""

        if not isinstance(plaintext, str) or not isinstance(hashed, str):
            return False
        if not plaintext or not hashed:
            return False
        try:
            return bcrypt.checkpw(self._encode(plaintext), hashed.encode("utf-8"))
        except ValueError:
            self.logger.warning("Stored password hash is malformed")
            return False
