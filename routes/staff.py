"""Staff management blueprint."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from models.user import ROLE_ADMIN, ROLE_TRAINER
from services.staff_service import StaffService
from utils.auth import roles_required
from utils.request_validation import parse_bool, parse_json_request

staff_bp = Blueprint("staff", __name__)
staff_service = StaffService()


@staff_bp.route("", methods=["POST"])
@roles_required(ROLE_ADMIN)
def create_staff():
    """Attach a staff profile to an existing user."""

    payload = parse_json_request(
        request,
        required_keys=("user_id", "first_name", "last_name", "department", "contact_info"),
    )
    staff = staff_service.create_staff(payload["user_id"], payload)
    return jsonify(staff.to_dict()), HTTPStatus.CREATED


@staff_bp.route("", methods=["GET"])
@roles_required(ROLE_ADMIN, ROLE_TRAINER)
def list_staff():
    active_only = parse_bool(request.args.get("active_only"))
    staff = staff_service.list_staff(
        department=request.args.get("department"),
        active_only=active_only is not False,
    )
    return jsonify([member.to_dict(include_user=True) for member in staff])


@staff_bp.route("/<int:staff_id>", methods=["GET"])
@roles_required(ROLE_ADMIN, ROLE_TRAINER)
def get_staff(staff_id: int):
    return jsonify(staff_service.get_staff(staff_id).to_dict(include_user=True))


@staff_bp.route("/<int:staff_id>", methods=["PUT"])
@roles_required(ROLE_ADMIN)
def update_staff(staff_id: int):
    payload = parse_json_request(request)
    return jsonify(staff_service.update_staff(staff_id, payload).to_dict())


@staff_bp.route("/<int:staff_id>/deactivate", methods=["PUT"])
@roles_required(ROLE_ADMIN)
def deactivate_staff(staff_id: int):
    return jsonify(staff_service.set_active(staff_id, False).to_dict())


@staff_bp.route("/<int:staff_id>/clients", methods=["GET"])
@roles_required(ROLE_ADMIN, ROLE_TRAINER)
def staff_clients(staff_id: int):
    """List the clients assigned to a trainer."""

    clients = staff_service.staff_clients(staff_id)
    return jsonify([client.to_dict(include_user=True) for client in clients])
