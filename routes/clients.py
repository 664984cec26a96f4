"""Client profile blueprint."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from models.user import ROLE_ADMIN, ROLE_CLIENT, ROLE_TRAINER
from services.client_service import ClientService
from utils.auth import current_identity, roles_required
from utils.request_validation import parse_int, parse_json_request

clients_bp = Blueprint("clients", __name__)
client_service = ClientService()


@clients_bp.route("/profile", methods=["POST"])
@roles_required(ROLE_CLIENT)
def create_profile():
    """Create the caller's client profile."""

    payload = parse_json_request(request, required_keys=("first_name", "last_name"))
    profile = client_service.create_profile(current_identity().user_id, payload)
    return jsonify(profile.to_dict()), HTTPStatus.CREATED


@clients_bp.route("/profile", methods=["GET"])
@roles_required(ROLE_CLIENT)
def get_profile():
    profile = client_service.get_profile(current_identity().user_id)
    return jsonify(profile.to_dict(include_user=True))


@clients_bp.route("/profile", methods=["PUT"])
@roles_required(ROLE_CLIENT)
def update_profile():
    payload = parse_json_request(request)
    profile = client_service.update_profile(current_identity().user_id, payload)
    return jsonify(profile.to_dict())


@clients_bp.route("", methods=["GET"])
@roles_required(ROLE_ADMIN, ROLE_TRAINER)
def list_clients():
    page = parse_int(request.args.get("page"), "page", default=1, minimum=1)
    limit = parse_int(request.args.get("limit"), "limit", default=20, minimum=1)
    return jsonify(client_service.list_clients(page=page, limit=limit))


@clients_bp.route("/search", methods=["GET"])
@roles_required(ROLE_ADMIN, ROLE_TRAINER)
def search_clients():
    query = (request.args.get("query") or "").strip()
    if not query:
        raise BadRequest("Search query is required.")
    return jsonify([profile.to_dict() for profile in client_service.search_clients(query)])
