"""Refresh-token rotation, expiry and revocation."""

from __future__ import annotations

from datetime import timedelta

from flask.testing import FlaskClient

from models import db, utcnow
from models.tokens import RefreshToken
from models.user import User
from services.auth_service import AuthService


def _seed_user(app, email="member@example.com", password="Password123", role="CLIENT") -> int:
    with app.app_context():
        user = User(email=email, role=role, is_verified=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id


def _login(client: FlaskClient, email="member@example.com", password="Password123") -> dict:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.get_json()


def test_refresh_rotates_token_exactly_once(client: FlaskClient, app):
    _seed_user(app)
    tokens = _login(client)

    rotated = client.post("/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
    assert rotated.status_code == 200
    pair = rotated.get_json()
    assert set(pair) == {"access_token", "refresh_token"}
    assert pair["refresh_token"] != tokens["refresh_token"]

    reused = client.post("/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
    assert reused.status_code == 401
    assert reused.get_json()["detail"] == "Invalid or expired refresh token"

    again = client.post("/auth/refresh-token", json={"refresh_token": pair["refresh_token"]})
    assert again.status_code == 200

    with app.app_context():
        assert RefreshToken.query.count() == 1


def test_refreshed_access_token_works(client: FlaskClient, app):
    _seed_user(app)
    tokens = _login(client)

    pair = client.post(
        "/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]}
    ).get_json()
    response = client.get(
        "/auth/validate", headers={"Authorization": f"Bearer {pair['access_token']}"}
    )

    assert response.status_code == 200
    assert response.get_json()["email"] == "member@example.com"


def test_refresh_token_is_stored_hashed_with_seven_day_ttl(client: FlaskClient, app):
    _seed_user(app)
    tokens = _login(client)

    with app.app_context():
        record = RefreshToken.query.one()
        assert record.token_hash != tokens["refresh_token"]
        assert record.matches(tokens["refresh_token"])
        lifetime = record.expires_at - record.created_at

    assert len(tokens["refresh_token"]) == 80
    assert timedelta(days=6, hours=23) < lifetime <= timedelta(days=7)


def test_expired_refresh_token_is_rejected(client: FlaskClient, app):
    _seed_user(app)
    tokens = _login(client)

    with app.app_context():
        record = RefreshToken.query.one()
        record.expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()

    response = client.post("/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 401


def test_unknown_refresh_token_is_rejected(client: FlaskClient, app):
    _seed_user(app)
    _login(client)

    response = client.post("/auth/refresh-token", json={"refresh_token": "f" * 80})

    assert response.status_code == 401


def test_refresh_requires_token_field(client: FlaskClient):
    response = client.post("/auth/refresh-token", json={"token": "abc"})

    assert response.status_code == 400


def test_logout_revokes_refresh_token(client: FlaskClient, app):
    _seed_user(app)
    tokens = _login(client)

    response = client.post("/auth/logout", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200

    refreshed = client.post("/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 401

    with app.app_context():
        assert RefreshToken.query.one().revoked is True


def test_logout_with_unknown_token_is_quiet(client: FlaskClient):
    response = client.post("/auth/logout", json={"refresh_token": "deadbeef"})

    assert response.status_code == 200


def test_each_login_gets_its_own_session(client: FlaskClient, app):
    _seed_user(app)
    first = _login(client)
    second = _login(client)

    client.post("/auth/logout", json={"refresh_token": first["refresh_token"]})
    response = client.post("/auth/refresh-token", json={"refresh_token": second["refresh_token"]})

    assert response.status_code == 200


def test_admin_can_revoke_all_sessions(client: FlaskClient, app):
    member_id = _seed_user(app)
    tokens = _login(client)
    with app.app_context():
        admin = User(email="boss@example.com", role="ADMIN", is_verified=True)
        admin.set_password("AdminPass123")
        db.session.add(admin)
        db.session.commit()
        admin_token = AuthService.generate_access_token(admin)

    response = client.post(
        f"/users/{member_id}/revoke-tokens",
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert response.status_code == 200

    refreshed = client.post("/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 401


def test_refresh_token_consumed_concurrently_is_not_rotated_again(client: FlaskClient, app, monkeypatch):
    _seed_user(app)
    tokens = _login(client)

    def lookup_then_lose_race(self, raw_token):
        record = original_lookup(self, raw_token)
        record.user
        # Another request consumes the same token between lookup and rotation.
        RefreshToken.query.filter_by(id=record.id).delete(synchronize_session=False)
        return record

    original_lookup = AuthService._find_live_refresh_token
    monkeypatch.setattr(AuthService, "_find_live_refresh_token", lookup_then_lose_race)

    response = client.post("/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})

    assert response.status_code == 401
    assert response.get_json()["detail"] == "Invalid or expired refresh token"
    with app.app_context():
        assert RefreshToken.query.count() == 1
