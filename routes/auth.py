"""Authentication blueprint: registration, verification, sessions and password reset."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from services.auth_service import AuthService, normalize_email, parse_registration
from services.mail import EXTENSION_KEY
from utils.auth import authenticated, current_identity
from utils.request_validation import parse_json_request, require_strings

auth_bp = Blueprint("auth", __name__)


def _auth_service() -> AuthService:
    return AuthService(current_app.extensions[EXTENSION_KEY], current_app.config)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new account; clients receive a verification code by email."""
    payload = parse_json_request(request)
    registration = parse_registration(payload)
    user = _auth_service().register(registration)
    current_app.logger.info("Registered user %s with role %s", user.id, user.role)

    return (
        jsonify(
            {
                "message": "User registered successfully.",
                "user": user.to_dict(include_profile=True),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/verify", methods=["POST"])
def verify() -> tuple:
    """Consume an emailed verification code."""
    payload = parse_json_request(request, required_keys=("email", "code"))
    require_strings(payload, "email")
    result = _auth_service().verify_user(payload["email"], str(payload["code"]))
    return jsonify(result), HTTPStatus.OK


@auth_bp.route("/verify/resend", methods=["POST"])
def resend_verification() -> tuple:
    payload = parse_json_request(request, required_keys=("email",))
    require_strings(payload, "email")
    return jsonify(_auth_service().resend_verification(payload["email"])), HTTPStatus.OK


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return an access/refresh token pair."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    require_strings(payload, "email", "password")
    result = _auth_service().login(normalize_email(payload["email"]), payload["password"])
    return jsonify(result), HTTPStatus.OK


@auth_bp.route("/refresh-token", methods=["POST"])
def refresh_token() -> tuple:
    """Exchange a refresh token for a new pair; the old token stops working."""
    payload = parse_json_request(request, required_keys=("refresh_token",))
    require_strings(payload, "refresh_token")
    return jsonify(_auth_service().refresh(payload["refresh_token"])), HTTPStatus.OK


@auth_bp.route("/logout", methods=["POST"])
def logout() -> tuple:
    payload = parse_json_request(request, required_keys=("refresh_token",))
    require_strings(payload, "refresh_token")
    return jsonify(_auth_service().logout(payload["refresh_token"])), HTTPStatus.OK


@auth_bp.route("/reset-password", methods=["POST"])
def request_password_reset() -> tuple:
    """Start a password reset. The response never reveals whether the email exists."""
    payload = parse_json_request(request, required_keys=("email",))
    require_strings(payload, "email")
    return jsonify(_auth_service().request_password_reset(payload["email"])), HTTPStatus.OK


@auth_bp.route("/reset-password/confirm", methods=["POST"])
def confirm_password_reset() -> tuple:
    payload = parse_json_request(
        request, required_keys=("email", "token", "new_password")
    )
    require_strings(payload, "email", "token", "new_password")
    result = _auth_service().reset_password(
        payload["email"], payload["token"], payload["new_password"]
    )
    return jsonify(result), HTTPStatus.OK


@auth_bp.route("/validate", methods=["GET"])
@authenticated
def validate() -> tuple:
    """Return the identity encoded in the bearer token."""
    return jsonify(current_identity().to_dict()), HTTPStatus.OK
