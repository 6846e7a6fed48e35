"""User lookup restricted to the account owner or an administrator."""

from __future__ import annotations

from flask import Blueprint, jsonify

from services import get_services
from utils.auth import owner_or_admin, token_required
from utils.errors import NotFound

users_bp = Blueprint("users", __name__)


@users_bp.route("/<user_id>", methods=["GET"])
@token_required
@owner_or_admin("user_id")
def get_user(user_id: str):
    user = get_services().store.get(user_id)
    if user is None:
        raise NotFound("User not found.")
    return jsonify({"user": user.to_safe_dict()})
