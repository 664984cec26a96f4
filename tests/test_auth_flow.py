"""Tests covering registration, verification and login flows."""

from __future__ import annotations

import re
from datetime import timedelta

import pytest
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token, decode_token

from models import db, utcnow
from models.tokens import VerificationCode
from models.user import User
from services.auth_service import AuthService


def _create_user(
    email: str,
    password: str,
    role: str = "CLIENT",
    *,
    verified: bool = True,
) -> User:
    """Helper to create and persist a user."""

    user = User(email=email, role=role, is_verified=verified, first_name="Jo", last_name="Lee")
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def _register(client: FlaskClient, **payload):
    return client.post("/auth/register", json=payload)


def _emailed_code(mailer) -> str:
    match = re.search(r"verification code is (\d{5})", mailer.outbox[-1].text)
    assert match is not None
    return match.group(1)


def test_register_verify_login_and_call_protected_route(client: FlaskClient, mailer, app):
    """A client can only log in after verifying the emailed code."""

    response = _register(
        client,
        email="Client@Example.com",
        password="Sup3rSecret!",
        first_name="Cleo",
        last_name="Patra",
    )
    assert response.status_code == 201
    user_payload = response.get_json()["user"]
    assert user_payload["email"] == "client@example.com"
    assert user_payload["role"] == "CLIENT"
    assert user_payload["is_verified"] is False
    assert user_payload["client_profile"]["first_name"] == "Cleo"

    assert mailer.outbox[-1].to == "client@example.com"
    code = _emailed_code(mailer)

    blocked = client.post(
        "/auth/login", json={"email": "client@example.com", "password": "Sup3rSecret!"}
    )
    assert blocked.status_code == 401
    assert "verify" in blocked.get_json()["detail"]

    verified = client.post("/auth/verify", json={"email": "client@example.com", "code": code})
    assert verified.status_code == 200
    assert verified.get_json() == {"message": "User verification successful"}

    login = client.post(
        "/auth/login", json={"email": "client@example.com", "password": "Sup3rSecret!"}
    )
    assert login.status_code == 200
    tokens = login.get_json()
    assert tokens["refresh_token"]
    assert tokens["user"]["id"] == user_payload["id"]

    with app.app_context():
        claims = decode_token(tokens["access_token"])
    assert claims["sub"] == str(user_payload["id"])
    assert claims["role"] == "CLIENT"
    assert claims["email"] == "client@example.com"

    validate = client.get(
        "/auth/validate", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )
    assert validate.status_code == 200
    assert validate.get_json()["user_id"] == user_payload["id"]

    garbage = client.get("/auth/validate", headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401


def test_expired_access_token_is_rejected(client: FlaskClient, app):
    with app.app_context():
        user = _create_user("expired@example.com", "Password123")
        token = create_access_token(identity=str(user.id), expires_delta=timedelta(seconds=-1))

    response = client.get("/auth/validate", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.get_json()["detail"] == "Invalid or expired token."


def test_access_token_expires_after_fifteen_minutes(client: FlaskClient, app):
    with app.app_context():
        _create_user("ttl@example.com", "Password123")

    response = client.post("/auth/login", json={"email": "ttl@example.com", "password": "Password123"})
    with app.app_context():
        claims = decode_token(response.get_json()["access_token"])

    assert claims["exp"] - claims["iat"] == 15 * 60


def test_duplicate_registration_is_rejected(client: FlaskClient, app):
    first = _register(client, email="dup@example.com", password="Password123")
    second = _register(client, email="DUP@example.com", password="Other12345")

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.get_json()["detail"] == "User already exists"

    with app.app_context():
        users = User.query.filter_by(email="dup@example.com").all()
        assert len(users) == 1
        assert users[0].password_hash != "Password123"
        assert users[0].check_password("Password123")


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "missing@example.com"},
        {"password": "Password123"},
        {"email": "role@example.com", "password": "Password123", "role": "OWNER"},
    ],
)
def test_register_validation(client: FlaskClient, payload):
    response = _register(client, **payload)

    assert response.status_code == 400


def test_client_without_names_registers_without_profile(client: FlaskClient, mailer):
    response = _register(client, email="noname@example.com", password="Password123")

    assert response.status_code == 201
    user_payload = response.get_json()["user"]
    assert user_payload["client_profile"] is None
    assert len(mailer.outbox) == 1


def test_staff_registration_is_auto_verified(client: FlaskClient, mailer):
    response = _register(
        client,
        email="coach@example.com",
        password="Password123",
        role="trainer",
        first_name="Rocky",
        last_name="Balboa",
        department="training",
        contact_info="555-0101",
    )

    assert response.status_code == 201
    user_payload = response.get_json()["user"]
    assert user_payload["role"] == "TRAINER"
    assert user_payload["is_verified"] is True
    assert user_payload["staff_profile"]["department"] == "TRAINING"
    assert mailer.outbox == []

    login = client.post("/auth/login", json={"email": "coach@example.com", "password": "Password123"})
    assert login.status_code == 200


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"email": "member@example.com"}, 400),
        ({"password": "Member123"}, 400),
        ({"email": "member@example.com", "password": "wrong"}, 401),
        ({"email": "nobody@example.com", "password": "Member123"}, 401),
    ],
)
def test_login_validation(client: FlaskClient, db_session, payload, status_code):
    """Login endpoint should validate request bodies and credentials."""

    _create_user("member@example.com", "Member123")

    response = client.post("/auth/login", json=payload)

    assert response.status_code == status_code


def test_unknown_email_and_bad_password_share_message(client: FlaskClient, db_session):
    _create_user("same@example.com", "Member123")

    unknown = client.post("/auth/login", json={"email": "x@example.com", "password": "Member123"})
    wrong = client.post("/auth/login", json={"email": "same@example.com", "password": "nope"})

    assert unknown.get_json()["detail"] == wrong.get_json()["detail"]


def test_verification_code_is_single_use(client: FlaskClient, mailer, app):
    _register(client, email="once@example.com", password="Password123")
    code = _emailed_code(mailer)

    first = client.post("/auth/verify", json={"email": "once@example.com", "code": code})
    second = client.post("/auth/verify", json={"email": "once@example.com", "code": code})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.get_json()["detail"] == "Invalid or expired code"


def test_expired_verification_code_is_rejected(client: FlaskClient, mailer, app):
    _register(client, email="late@example.com", password="Password123")
    code = _emailed_code(mailer)

    with app.app_context():
        record = VerificationCode.query.filter_by(code=code).one()
        record.expires_at = utcnow() - timedelta(minutes=1)
        db.session.commit()

    response = client.post("/auth/verify", json={"email": "late@example.com", "code": code})

    assert response.status_code == 400
    with app.app_context():
        assert User.query.filter_by(email="late@example.com").one().is_verified is False


def test_verification_code_expires_after_a_day(client: FlaskClient, app):
    _register(client, email="ttl-code@example.com", password="Password123")

    with app.app_context():
        record = VerificationCode.query.one()
        lifetime = record.expires_at - record.created_at

    assert timedelta(hours=23, minutes=59) < lifetime <= timedelta(hours=24)


def test_verify_with_unknown_email(client: FlaskClient):
    response = client.post("/auth/verify", json={"email": "ghost@example.com", "code": "12345"})

    assert response.status_code == 400
    assert response.get_json()["detail"] == "Invalid email"


def test_resend_supersedes_previous_code(client: FlaskClient, mailer):
    _register(client, email="resend@example.com", password="Password123")
    old_code = _emailed_code(mailer)

    response = client.post("/auth/verify/resend", json={"email": "resend@example.com"})
    assert response.status_code == 200
    new_code = _emailed_code(mailer)
    assert len(mailer.outbox) == 2

    fresh = client.post("/auth/verify", json={"email": "resend@example.com", "code": new_code})
    stale = client.post("/auth/verify", json={"email": "resend@example.com", "code": old_code})

    assert fresh.status_code == 200
    assert stale.status_code == 400


def test_resend_is_generic_for_unknown_email(client: FlaskClient, mailer):
    response = client.post("/auth/verify/resend", json={"email": "ghost@example.com"})

    assert response.status_code == 200
    assert mailer.outbox == []


def test_code_consumed_concurrently_verifies_only_once(client: FlaskClient, mailer, app, monkeypatch):
    _register(client, email="race@example.com", password="Password123")
    code = _emailed_code(mailer)

    original_lookup = AuthService._find_unused_code

    def lookup_then_lose_race(user, raw_code):
        record = original_lookup(user, raw_code)
        # Another request consumes the code between lookup and update.
        VerificationCode.query.filter_by(id=record.id).update(
            {"used": True}, synchronize_session=False
        )
        return record

    monkeypatch.setattr(AuthService, "_find_unused_code", staticmethod(lookup_then_lose_race))

    response = client.post("/auth/verify", json={"email": "race@example.com", "code": code})

    assert response.status_code == 400
    assert response.get_json()["detail"] == "Invalid or expired code"


def test_staff_registration_issues_no_verification_code(client: FlaskClient, app):
    _register(client, email="admin2@example.com", password="Password123", role="ADMIN")

    with app.app_context():
        assert VerificationCode.query.count() == 0


@pytest.mark.parametrize(
    "payload",
    [
        {"email": 42, "password": "Password123"},
        {"email": "typed@example.com", "password": 12345678},
        {"email": ["typed@example.com"], "password": "Password123"},
    ],
)
def test_register_rejects_non_string_credentials(client: FlaskClient, payload):
    response = _register(client, **payload)

    assert response.status_code == 400


@pytest.mark.parametrize(
    "path, payload",
    [
        ("/auth/login", {"email": 42, "password": "Password123"}),
        ("/auth/login", {"email": "typed@example.com", "password": 12345678}),
        ("/auth/verify", {"email": 42, "code": "12345"}),
        ("/auth/verify/resend", {"email": 42}),
        ("/auth/refresh-token", {"refresh_token": 123}),
        ("/auth/logout", {"refresh_token": 123}),
        ("/auth/reset-password", {"email": 42}),
        (
            "/auth/reset-password/confirm",
            {"email": "typed@example.com", "token": "abc", "new_password": 12345678},
        ),
    ],
)
def test_auth_routes_reject_non_string_fields(client: FlaskClient, path, payload):
    response = client.post(path, json=payload)

    assert response.status_code == 400
    assert response.get_json()["detail"].startswith("Fields must be strings")
