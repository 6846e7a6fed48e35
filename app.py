"""Application factory."""

import os
import uuid

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from config import Config, get_config
from extensions import cors, jwt, limiter, migrate
from models import db
from routes.admin import admin_bp
from routes.ai import ai_bp
from routes.auth import auth_bp
from routes.users import users_bp
from services import init_services
from utils.clock import uptime, utcnow
from utils.errors import APIError, error_code_for


def create_app(config_class: type[Config] | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class or get_config())
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    init_services(app)

    # CORS
    cors.init_app(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    if not app.config.get("RATELIMIT_KEY_PREFIX"):
        app.config["RATELIMIT_KEY_PREFIX"] = str(uuid.uuid4())
    limiter.init_app(app)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(ai_bp, url_prefix="/ai")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify(
            {
                "status": "ok",
                "timestamp": utcnow().isoformat(),
                "uptime": uptime(),
            }
        )

    _register_request_hooks(app)
    _register_error_handlers(app)

    return app


def _register_request_hooks(app: Flask) -> None:
    """Assign request IDs and log each incoming request."""

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        app.logger.info("%s %s - %s", request.method, request.path, request.remote_addr)

    @app.after_request
    def _add_request_id_header(response):
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response


def _error_payload(error_name: str, code: str, detail: str) -> dict:
    return {
        "error": error_name,
        "code": code,
        "detail": detail,
        "request_id": g.get("request_id") or str(uuid.uuid4()),
    }


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        payload = _error_payload(
            getattr(error, "name", "Error"), error_code_for(error), error.description
        )
        if isinstance(error, APIError) and error.details:
            payload["details"] = error.details

        response = jsonify(payload)
        response.status_code = error.code or 500
        for header, value in error.get_headers():
            if header.lower() != "content-type":
                response.headers[header] = value
        response.headers.setdefault("X-Request-ID", payload["request_id"])
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        current_app.logger.exception("Unhandled application error", exc_info=error)
        detail = "An unexpected error occurred."
        if current_app.config.get("EXPOSE_ERROR_DETAILS"):
            detail = str(error) or detail
        payload = _error_payload("Internal Server Error", "internal_error", detail)
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", payload["request_id"])
        return response


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
