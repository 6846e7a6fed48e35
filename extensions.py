"""Flask extension instances shared by the app factory and blueprints."""

from flask import current_app
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate


def _default_rate_limit() -> str:
    return current_app.config.get("RATE_LIMIT", "100 per 15 minutes")


migrate = Migrate()
jwt = JWTManager()
cors = CORS()
limiter = Limiter(key_func=get_remote_address, default_limits=[_default_rate_limit])
