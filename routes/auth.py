"""Authentication blueprint: registration, login, sessions and profile."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, g, jsonify, request

from extensions import limiter
from services import get_services
from utils.auth import current_user, token_required
from utils.errors import ValidationError
from utils.request_validation import (
    email_error,
    known_preferences,
    name_error,
    normalize_email,
    parse_json_request,
    preferences_errors,
)

auth_bp = Blueprint("auth", __name__)


def _login_limit() -> str:
    return current_app.config["LOGIN_RATE_LIMIT"]


def _register_limit() -> str:
    return current_app.config["REGISTER_RATE_LIMIT"]


def _failed_response(response) -> bool:
    """Only unsuccessful login attempts count against the login limit."""

    return response.status_code >= 400


def _session_payload(message: str, user, issued) -> dict:
    return {
        "message": message,
        "user": user.to_safe_dict(),
        "token": issued.token,
        "expires_at": issued.expires_at.isoformat(),
    }


@auth_bp.route("/register", methods=["POST"])
@limiter.limit(_register_limit)
def register() -> tuple:
    """Create an account and start its first session."""

    payload = parse_json_request(request)
    password = payload.get("password")
    confirm = payload.get("confirm_password")
    if confirm is not None and confirm != password:
        raise ValidationError(
            details=[{"field": "confirm_password", "message": "Passwords do not match"}]
        )

    user, issued = get_services().auth.register(
        email=payload.get("email"),
        password=password,
        first_name=payload.get("first_name"),
        last_name=payload.get("last_name"),
        ip_address=request.remote_addr,
    )

    return (
        jsonify(_session_payload("User registered successfully.", user, issued)),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(_login_limit, deduct_when=_failed_response)
def login() -> tuple:
    """Authenticate with email and password and return a bearer token."""

    payload = parse_json_request(request)
    email = normalize_email(payload.get("email"))
    password = payload.get("password")

    errors = []
    message = email_error(email)
    if message:
        errors.append({"field": "email", "message": message})
    if not isinstance(password, str) or not password:
        errors.append({"field": "password", "message": "Password is required"})
    if errors:
        raise ValidationError(details=errors)

    user, issued = get_services().auth.login(email, password, request.remote_addr)
    return jsonify(_session_payload("Login successful.", user, issued)), HTTPStatus.OK


@auth_bp.route("/logout", methods=["POST"])
@token_required
def logout():
    """Revoke the token used for this request."""

    get_services().auth.logout(current_user(), g.token_claims["jti"])
    return jsonify({"message": "Logout successful."})


@auth_bp.route("/logout-all", methods=["POST"])
@token_required
def logout_all():
    """Revoke every token issued to the current user."""

    get_services().auth.logout_all(current_user())
    return jsonify({"message": "Logged out from all devices successfully."})


@auth_bp.route("/profile", methods=["GET"])
@token_required
def get_profile():
    return jsonify({"user": current_user().to_safe_dict()})


@auth_bp.route("/profile", methods=["PUT"])
@token_required
def update_profile():
    """Update names and reading preferences of the current user."""

    payload = parse_json_request(request)
    user = current_user()

    errors = []
    for field, label in (("first_name", "First name"), ("last_name", "Last name")):
        if field in payload:
            message = name_error(payload[field], label)
            if message:
                errors.append({"field": field, "message": message})
    preferences = payload.get("preferences")
    if preferences is not None:
        errors.extend(preferences_errors(preferences))
    if errors:
        raise ValidationError(details=errors)

    if "first_name" in payload:
        user.first_name = payload["first_name"].strip()
    if "last_name" in payload:
        user.last_name = payload["last_name"].strip()
    if preferences:
        user.preferences = {
            **(user.preferences or {}),
            **known_preferences(preferences),
        }

    get_services().store.save(user)
    current_app.logger.info("Profile updated for user %s", user.id)

    return jsonify(
        {"message": "Profile updated successfully.", "user": user.to_safe_dict()}
    )


@auth_bp.route("/password", methods=["PUT"])
@token_required
def change_password():
    """Change the password; other sessions of the user are revoked."""

    payload = parse_json_request(request, required_keys=("current_password", "new_password"))
    new_password = payload["new_password"]
    confirm = payload.get("confirm_password")
    if confirm is not None and confirm != new_password:
        raise ValidationError(
            details=[{"field": "confirm_password", "message": "Passwords do not match"}]
        )

    get_services().auth.change_password(
        current_user(),
        payload["current_password"],
        new_password,
        keep_jti=g.token_claims["jti"],
    )
    return jsonify({"message": "Password updated successfully."})


@auth_bp.route("/verify", methods=["GET"])
@token_required
def verify():
    """Report that the presented token is still live."""

    return jsonify({"valid": True, "user": current_user().to_safe_dict()})
