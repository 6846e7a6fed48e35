"""Application configuration module."""

import os
import re
from datetime import timedelta


_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: str | None, default: timedelta) -> timedelta:
    """Parse a duration such as ``7d``, ``12h``, ``30m`` or ``3600``."""

    if not value:
        return default
    match = _DURATION_PATTERN.match(value.lower())
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///echolearn.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    EXPOSE_ERROR_DETAILS = _env_bool("EXPOSE_ERROR_DETAILS")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Tokens
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES = parse_duration(
        os.getenv("JWT_EXPIRES_IN"), timedelta(days=7)
    )
    JWT_ENCODE_ISSUER = os.getenv("JWT_ISSUER", "echolearn-api")
    JWT_DECODE_ISSUER = JWT_ENCODE_ISSUER
    JWT_ENCODE_AUDIENCE = os.getenv("JWT_AUDIENCE", "echolearn-client")
    JWT_DECODE_AUDIENCE = JWT_ENCODE_AUDIENCE
    JWT_TOKEN_LOCATION = ["headers"]

    # Passwords and lockout
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
    LOCKOUT_MAX_ATTEMPTS = int(os.getenv("LOCKOUT_MAX_ATTEMPTS", "5"))
    LOCKOUT_DURATION = timedelta(
        minutes=int(os.getenv("LOCKOUT_DURATION_MINUTES", "120"))
    )

    # CORS
    _raw_origins = os.getenv("ORIGINS", "http://localhost:5173")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Rate limiting
    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATE_LIMIT = os.getenv("RATE_LIMIT", "100 per 15 minutes")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")
    LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "3 per 15 minutes")
    REGISTER_RATE_LIMIT = os.getenv("REGISTER_RATE_LIMIT", "3 per hour")
    AI_RATE_LIMIT = os.getenv("AI_RATE_LIMIT", "10 per 15 minutes")

    # Generative AI (optional)
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")


class DevelopmentConfig(Config):
    DEBUG = True
    EXPOSE_ERROR_DETAILS = True
    CORS_ORIGINS = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:3001",
    ]


class ProductionConfig(Config):
    EXPOSE_ERROR_DETAILS = False


_CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """Return the configuration class for ``env`` (defaults to ``APP_ENV``)."""

    name = (env or os.getenv("APP_ENV", "production")).strip().lower()
    return _CONFIGS.get(name, Config)
