"""Administrative user management blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from models.user import ROLE_ADMIN
from services.user_service import UserService
from utils.auth import roles_required, self_or_admin
from utils.request_validation import parse_bool, parse_json_request

users_bp = Blueprint("users", __name__)
user_service = UserService()


@users_bp.route("", methods=["GET"])
@roles_required(ROLE_ADMIN)
def list_users():
    """List users, optionally filtered by role and verification state."""

    role = (request.args.get("role") or "").upper() or None
    verified = parse_bool(request.args.get("verified"))
    users = user_service.list_users(role=role, verified=verified)
    return jsonify([user.to_dict(include_profile=True) for user in users])


@users_bp.route("/stats", methods=["GET"])
@roles_required(ROLE_ADMIN)
def user_stats():
    return jsonify(user_service.user_stats())


@users_bp.route("/search", methods=["GET"])
@roles_required(ROLE_ADMIN)
def search_users():
    query = (request.args.get("q") or "").strip()
    if not query:
        raise BadRequest("Search query is required.")
    return jsonify([user.to_dict() for user in user_service.search_users(query)])


@users_bp.route("/<int:user_id>", methods=["GET"])
@self_or_admin("user_id")
def get_user(user_id: int):
    """Return a user with profile and session metadata."""

    user = user_service.get_user(user_id)
    payload = user.to_dict(include_profile=True)
    payload["refresh_tokens"] = [token.to_dict() for token in user.refresh_tokens]
    return jsonify(payload)


@users_bp.route("/<int:user_id>", methods=["PUT"])
@roles_required(ROLE_ADMIN)
def update_user(user_id: int):
    payload = parse_json_request(request)
    if "role" in payload and isinstance(payload["role"], str):
        payload["role"] = payload["role"].upper()
    user = user_service.update_user(user_id, payload)
    return jsonify(user.to_dict())


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@roles_required(ROLE_ADMIN)
def delete_user(user_id: int):
    user_service.delete_user(user_id)
    return jsonify({"message": "User deleted successfully"})


@users_bp.route("/<int:user_id>/revoke-tokens", methods=["POST"])
@roles_required(ROLE_ADMIN)
def revoke_tokens(user_id: int):
    """Invalidate every refresh token of the user, forcing a new login."""

    return jsonify(user_service.revoke_refresh_tokens(user_id))
