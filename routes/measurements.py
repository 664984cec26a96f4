"""Body measurement blueprint.

Routes are keyed by the owning user's id so the self-or-admin guard can compare
it with the caller's identity.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from services.measurement_service import DEFAULT_LIMIT, MeasurementService
from utils.auth import self_or_admin
from utils.request_validation import parse_datetime, parse_int, parse_json_request

measurements_bp = Blueprint("measurements", __name__)
measurement_service = MeasurementService()


@measurements_bp.route("/<int:user_id>", methods=["POST"])
@self_or_admin("user_id")
def create_measurement(user_id: int):
    client = measurement_service.client_for_user(user_id)
    payload = parse_json_request(request)
    measurement = measurement_service.create_measurement(client, payload)
    return jsonify(measurement.to_dict()), HTTPStatus.CREATED


@measurements_bp.route("/<int:user_id>", methods=["GET"])
@self_or_admin("user_id")
def list_measurements(user_id: int):
    """List measurements newest first, with optional date window and paging."""

    client = measurement_service.client_for_user(user_id)
    result = measurement_service.list_measurements(
        client,
        start_date=parse_datetime(request.args.get("start_date"), "start_date"),
        end_date=parse_datetime(request.args.get("end_date"), "end_date"),
        limit=parse_int(request.args.get("limit"), "limit", default=DEFAULT_LIMIT, minimum=1),
        offset=parse_int(request.args.get("offset"), "offset", default=0),
    )
    return jsonify(result)


@measurements_bp.route("/<int:user_id>/latest", methods=["GET"])
@self_or_admin("user_id")
def latest_measurement(user_id: int):
    client = measurement_service.client_for_user(user_id)
    return jsonify(measurement_service.latest_measurement(client).to_dict())


@measurements_bp.route("/<int:user_id>/<int:measurement_id>", methods=["GET"])
@self_or_admin("user_id")
def get_measurement(user_id: int, measurement_id: int):
    client = measurement_service.client_for_user(user_id)
    return jsonify(measurement_service.get_measurement(client, measurement_id).to_dict())


@measurements_bp.route("/<int:user_id>/<int:measurement_id>", methods=["PUT"])
@self_or_admin("user_id")
def update_measurement(user_id: int, measurement_id: int):
    client = measurement_service.client_for_user(user_id)
    payload = parse_json_request(request)
    measurement = measurement_service.update_measurement(client, measurement_id, payload)
    return jsonify(measurement.to_dict())


@measurements_bp.route("/<int:user_id>/<int:measurement_id>", methods=["DELETE"])
@self_or_admin("user_id")
def delete_measurement(user_id: int, measurement_id: int):
    client = measurement_service.client_for_user(user_id)
    measurement_service.delete_measurement(client, measurement_id)
    return jsonify({"message": "Measurement deleted successfully"})
