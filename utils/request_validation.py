"""Utilities for validating incoming Flask requests and user fields."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from email_validator import EmailNotValidError, validate_email
from flask import Request

from utils.errors import ValidationError

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIALS = "@$!%*?&"
NAME_MAX_LENGTH = 50

THEMES = ("light", "cream", "blue", "yellow", "dark")
LANGUAGES = ("en-US", "en-GB", "zh-HK", "zh-CN", "zh-TW")
FONT_SIZE_RANGE = (12, 24)
PREFERENCE_KEYS = ("theme", "font_size", "language")

_SPECIALS_CLASS = re.escape(PASSWORD_SPECIALS)
_PASSWORD_PATTERN = re.compile(
    rf"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[{_SPECIALS_CLASS}])[A-Za-z\d{_SPECIALS_CLASS}]"
)
_PASSWORD_RULE = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one number, and one special character"
)


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise ValidationError("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise ValidationError("Request JSON body is required.")

    if not isinstance(data, dict):
        raise ValidationError("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise ValidationError("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise ValidationError(
                "Missing required fields: {}.".format(", ".join(sorted(missing))),
                details=[
                    {"field": key, "message": f"{key} is required"}
                    for key in sorted(missing)
                ],
            )

    return data


def normalize_email(raw_email: Any) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""

    if not isinstance(raw_email, str):
        return ""
    return raw_email.strip().lower()


def email_error(email: str) -> str | None:
    if not email:
        return "Email is required"
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return "Please provide a valid email address"
    return None


def password_error(password: Any) -> str | None:
    if not isinstance(password, str) or not password:
        return "Password is required"
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    if not _PASSWORD_PATTERN.match(password):
        return _PASSWORD_RULE
    return None


def name_error(value: Any, label: str) -> str | None:
    if not isinstance(value, str) or not 1 <= len(value.strip()) <= NAME_MAX_LENGTH:
        return f"{label} must be between 1 and {NAME_MAX_LENGTH} characters"
    return None


def preferences_errors(preferences: Any) -> list[dict[str, str]]:
    """Validate a (possibly partial) preferences mapping."""

    if not isinstance(preferences, Mapping):
        return [{"field": "preferences", "message": "Preferences must be an object"}]

    errors = []
    theme = preferences.get("theme")
    if theme is not None and theme not in THEMES:
        errors.append({"field": "preferences.theme", "message": "Invalid theme"})

    font_size = preferences.get("font_size")
    if font_size is not None:
        low, high = FONT_SIZE_RANGE
        if (
            isinstance(font_size, bool)
            or not isinstance(font_size, int)
            or not low <= font_size <= high
        ):
            errors.append(
                {
                    "field": "preferences.font_size",
                    "message": f"Font size must be between {low} and {high}",
                }
            )

    language = preferences.get("language")
    if language is not None and language not in LANGUAGES:
        errors.append({"field": "preferences.language", "message": "Invalid language"})
    return errors


def known_preferences(preferences: Mapping) -> dict:
    """Return only the recognised preference keys; others are dropped."""

    return {key: preferences[key] for key in PREFERENCE_KEYS if key in preferences}


def parse_pagination(
    args: Mapping[str, str], *, default_limit: int = 10, max_limit: int = 100
) -> tuple[int, int]:
    """Return ``(page, limit)`` from query arguments or raise a 400 error."""

    try:
        page = int(args.get("page", 1))
        limit = int(args.get("limit", default_limit))
    except (TypeError, ValueError):
        raise ValidationError("Invalid pagination parameters.") from None

    if page < 1 or limit < 1 or limit > max_limit:
        raise ValidationError("Invalid pagination parameters.")
    return page, limit


def parse_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return None
