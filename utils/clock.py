"""Time helpers."""

import time
from datetime import UTC, datetime

_STARTED_AT = time.monotonic()


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, as stored in the database."""

    return datetime.now(UTC).replace(tzinfo=None)


def uptime() -> float:
    """Seconds since the process loaded the application, rounded to ms."""

    return round(time.monotonic() - _STARTED_AT, 3)
