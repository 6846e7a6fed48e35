"""Administrative user management blueprint."""

from __future__ import annotations

import math
import platform

from flask import Blueprint, current_app, jsonify, request

from models.user import Role, User
from services import get_services
from utils.auth import authenticate_request, current_user, require_roles
from utils.clock import uptime, utcnow
from utils.errors import NotFound, ValidationError
from utils.request_validation import parse_bool, parse_json_request, parse_pagination

admin_bp = Blueprint("admin", __name__)


@admin_bp.before_request
def _require_admin() -> None:
    authenticate_request()
    require_roles(Role.ADMIN)


def _get_user_or_404(user_id: str) -> User:
    user = get_services().store.get(user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def _reject_self(user_id: str, message: str) -> None:
    if user_id == current_user().id:
        raise ValidationError(message)


def _page_payload(users: list[User], page: int, limit: int, total: int) -> dict:
    return {
        "success": True,
        "users": [user.to_safe_dict() for user in users],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@admin_bp.route("/users", methods=["GET"])
def list_users():
    page, limit = parse_pagination(request.args)
    users, total = get_services().store.paginate(page, limit)
    current_app.logger.info("Admin %s fetched users list", current_user().id)
    return jsonify(_page_payload(users, page, limit, total))


@admin_bp.route("/users/<user_id>", methods=["GET"])
def get_user(user_id: str):
    user = _get_user_or_404(user_id)
    return jsonify({"success": True, "user": user.to_safe_dict()})


@admin_bp.route("/users/<user_id>/role", methods=["PUT"])
def update_role(user_id: str):
    """Change another user's role."""

    payload = parse_json_request(request)
    role = Role.parse(payload.get("role"))
    if role is None:
        raise ValidationError(
            details=[
                {
                    "field": "role",
                    "message": "Invalid role. Must be user, admin, or teacher",
                }
            ]
        )
    _reject_self(user_id, "Cannot change your own role.")

    user = _get_user_or_404(user_id)
    old_role = user.role
    user.role = role
    get_services().store.save(user)

    current_app.logger.info(
        "Admin %s changed user %s role from %s to %s",
        current_user().id,
        user.id,
        old_role.value,
        role.value,
    )
    return jsonify(
        {
            "success": True,
            "message": "User role updated successfully.",
            "user": user.to_safe_dict(),
        }
    )


@admin_bp.route("/users/<user_id>/status", methods=["PUT"])
def update_status(user_id: str):
    """Activate or deactivate another user; deactivation ends their sessions."""

    payload = parse_json_request(request)
    is_active = parse_bool(payload.get("is_active"))
    if is_active is None:
        raise ValidationError(
            details=[{"field": "is_active", "message": "is_active must be a boolean"}]
        )
    _reject_self(user_id, "Cannot change your own status.")

    user = _get_user_or_404(user_id)
    get_services().auth.set_active(user, is_active)

    state = "activated" if is_active else "deactivated"
    current_app.logger.info("Admin %s %s user %s", current_user().id, state, user.id)
    return jsonify(
        {
            "success": True,
            "message": f"User {state} successfully.",
            "user": user.to_safe_dict(),
        }
    )


@admin_bp.route("/users/<user_id>", methods=["DELETE"])
def delete_user(user_id: str):
    """Soft delete: the account is deactivated, never removed."""

    _reject_self(user_id, "Cannot delete your own account.")
    user = _get_user_or_404(user_id)
    get_services().auth.set_active(user, False)

    current_app.logger.info("Admin %s deleted user %s", current_user().id, user.id)
    return jsonify({"success": True, "message": "User deleted successfully."})


@admin_bp.route("/users/<user_id>/logout-all", methods=["POST"])
def force_logout(user_id: str):
    user = _get_user_or_404(user_id)
    get_services().auth.logout_all(user)

    current_app.logger.info(
        "Admin %s forced logout for user %s", current_user().id, user.id
    )
    return jsonify(
        {"success": True, "message": "User logged out from all devices successfully."}
    )


@admin_bp.route("/stats", methods=["GET"])
def stats():
    store = get_services().store
    return jsonify(
        {
            "success": True,
            "stats": {
                "users": {
                    "total": store.count(),
                    "active": store.count(active=True),
                    "inactive": store.count(active=False),
                    "by_role": store.count_by_role(),
                },
                "system": {
                    "uptime": uptime(),
                    "timestamp": utcnow().isoformat(),
                    "python_version": platform.python_version(),
                    "platform": platform.system().lower(),
                    "architecture": platform.machine(),
                },
            },
        }
    )


@admin_bp.route("/search/users", methods=["GET"])
def search_users():
    query = (request.args.get("query") or "").strip()
    if len(query) < 2:
        raise ValidationError("Search query must be at least 2 characters long.")

    page, limit = parse_pagination(request.args)
    users, total = get_services().store.search(query, page, limit)
    current_app.logger.info(
        "Admin %s searched users", current_user().id
    )
    return jsonify(_page_payload(users, page, limit, total))
