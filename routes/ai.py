"""Study-material endpoints that work anonymously and per user."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from flask_limiter.util import get_remote_address

from extensions import limiter
from services import get_services
from utils.auth import bearer_token, current_user, optional_auth
from utils.clock import utcnow
from utils.errors import APIError

ai_bp = Blueprint("ai", __name__)

DEMO_USER = "demo-user"


def _ai_limit() -> str:
    return current_app.config["AI_RATE_LIMIT"]


def _ai_rate_key() -> str:
    """Throttle signed-in callers per account and anonymous callers per address."""

    token = bearer_token()
    if token is not None:
        try:
            return "user:" + get_services().tokens.verify(token)["sub"]
        except APIError:
            pass
    return get_remote_address()


@ai_bp.route("/usage-stats", methods=["GET"])
@limiter.limit(_ai_limit, key_func=_ai_rate_key)
@optional_auth
def usage_stats():
    """Return usage counters for the caller, or for the anonymous demo user."""

    user = current_user()
    return jsonify(
        {
            "success": True,
            "user": user.id if user is not None else DEMO_USER,
            "authenticated": user is not None,
            "stats": {
                "summaries_generated": 0,
                "questions_generated": 0,
                "words_looked_up": 0,
            },
            "timestamp": utcnow().isoformat(),
        }
    )


@ai_bp.route("/status", methods=["GET"])
@optional_auth
def status():
    configured = bool(current_app.config.get("GEMINI_API_KEY"))
    return jsonify(
        {
            "success": True,
            "api_key_configured": configured,
            "demo_mode": not configured,
            "authenticated": current_user() is not None,
            "timestamp": utcnow().isoformat(),
        }
    )
