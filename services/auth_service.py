"""Authentication and session management.

Access tokens are short-lived JWTs issued through flask-jwt-extended. Refresh
tokens, verification codes and password-reset tokens are persisted so they can
expire and be consumed exactly once:

* refresh tokens are random secrets stored only as salted hashes and rotated
  on every use;
* verification codes are short numeric codes emailed to new clients;
* reset tokens are random secrets emailed as a link and hashed at rest.

Every multi-row change (verify + mark used, reset + mark used, delete + issue
refresh token) is committed as one transaction.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlencode

from flask_jwt_extended import create_access_token
from sqlalchemy import func
from werkzeug.security import check_password_hash, generate_password_hash

from models import db, utcnow
from models.client_profile import ClientProfile
from models.staff import DEPARTMENTS, Staff
from models.tokens import PasswordResetToken, RefreshToken, VerificationCode
from models.user import ROLE_CLIENT, ROLES, STAFF_ROLES, User, hash_secret

from . import atomic
from .errors import AuthenticationError, ConflictError, ValidationError
from .mail import Mailer

RESET_REQUEST_MESSAGE = "If an account exists with this email, a reset link has been sent."
RESEND_MESSAGE = "If the account is awaiting verification, a new code has been sent."

# Checked against when the email is unknown so both failure paths cost one hash.
_DUMMY_HASH = generate_password_hash("gym-login-timing-dummy")


def normalize_email(raw_email: Optional[str]) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class ClientRegistration:
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str = ROLE_CLIENT

    @property
    def wants_profile(self) -> bool:
        return bool(self.first_name and self.last_name)


@dataclass(frozen=True)
class StaffRegistration:
    email: str
    password: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department: Optional[str] = None
    specialization: Optional[str] = None
    contact_info: Optional[str] = None

    @property
    def wants_profile(self) -> bool:
        return bool(
            self.first_name and self.last_name and self.department and self.contact_info
        )


Registration = Union[ClientRegistration, StaffRegistration]


def parse_registration(payload: Mapping[str, Any]) -> Registration:
    """Resolve a raw registration payload into the variant for its role."""

    raw_email = payload.get("email")
    password = payload.get("password")
    if raw_email is None or password is None:
        raise ValidationError("Email and password are required.")
    if not isinstance(raw_email, str) or not isinstance(password, str):
        raise ValidationError("Email and password must be strings.")
    email = normalize_email(raw_email)
    if not email or not password:
        raise ValidationError("Email and password are required.")

    role = (_clean(payload.get("role")) or ROLE_CLIENT).upper()
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")

    first_name = _clean(payload.get("first_name"))
    last_name = _clean(payload.get("last_name"))

    if role == ROLE_CLIENT:
        return ClientRegistration(
            email=email, password=password, first_name=first_name, last_name=last_name
        )

    department = _clean(payload.get("department"))
    if department is not None:
        department = department.upper()
        if department not in DEPARTMENTS:
            raise ValidationError(
                f"Department must be one of: {', '.join(DEPARTMENTS)}."
            )
    return StaffRegistration(
        email=email,
        password=password,
        role=role,
        first_name=first_name,
        last_name=last_name,
        department=department,
        specialization=_clean(payload.get("specialization")),
        contact_info=_clean(payload.get("contact_info")),
    )


class AuthService:
    """Registration, login and the token lifecycle."""

    def __init__(self, mailer: Mailer, config: Mapping[str, Any]):
        self.mailer = mailer
        self.config = config

    # -- token helpers -----------------------------------------------------

    @staticmethod
    def generate_verification_code() -> str:
        return str(10000 + secrets.randbelow(90000))

    @staticmethod
    def generate_access_token(user: User) -> str:
        return create_access_token(
            identity=str(user.id),
            additional_claims={
                "email": user.email,
                "role": user.role,
                "first_name": user.first_name,
                "last_name": user.last_name,
            },
        )

    def _issue_refresh_token(self, user: User) -> str:
        raw_token = secrets.token_hex(40)
        db.session.add(
            RefreshToken(
                user=user,
                token_hash=hash_secret(raw_token, "TOKEN_HASH_METHOD"),
                expires_at=utcnow() + self.config["REFRESH_TOKEN_TTL"],
            )
        )
        return raw_token

    def _issue_verification_code(self, user: User) -> str:
        VerificationCode.query.filter_by(user_id=user.id, used=False).update(
            {"used": True}
        )
        code = self.generate_verification_code()
        db.session.add(
            VerificationCode(
                user=user,
                code=code,
                expires_at=utcnow() + self.config["VERIFICATION_CODE_TTL"],
            )
        )
        return code

    def _find_live_refresh_token(self, raw_token: str) -> Optional[RefreshToken]:
        # Stored values are one-way hashes, so every live record is compared.
        candidates = RefreshToken.query.filter(
            RefreshToken.expires_at > utcnow(),
            RefreshToken.revoked.is_(False),
        ).all()
        return next((record for record in candidates if record.matches(raw_token)), None)

    @staticmethod
    def _find_unused_code(user: User, code: str) -> Optional[VerificationCode]:
        return (
            VerificationCode.query.filter_by(user_id=user.id, code=str(code).strip(), used=False)
            .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
            .first()
        )

    @staticmethod
    def _find_unused_reset_token(user: User) -> Optional[PasswordResetToken]:
        return (
            PasswordResetToken.query.filter_by(user_id=user.id, used=False)
            .order_by(PasswordResetToken.created_at.desc(), PasswordResetToken.id.desc())
            .first()
        )

    @staticmethod
    def _find_user(email: str) -> Optional[User]:
        return User.query.filter(func.lower(User.email) == normalize_email(email)).first()

    # -- registration ------------------------------------------------------

    def register(self, registration: Registration) -> User:
        if self._find_user(registration.email) is not None:
            raise ConflictError("User already exists")

        is_client = isinstance(registration, ClientRegistration)
        user = User(
            email=registration.email,
            first_name=registration.first_name,
            last_name=registration.last_name,
            role=registration.role,
            is_verified=registration.role in STAFF_ROLES,
        )
        user.set_password(registration.password)

        with atomic():
            db.session.add(user)
            db.session.flush()
            # Staff accounts are verified on creation and never need a code.
            code = self._issue_verification_code(user) if is_client else None
            if registration.wants_profile:
                if is_client:
                    user.client_profile = ClientProfile(
                        first_name=registration.first_name,
                        last_name=registration.last_name,
                    )
                else:
                    user.staff_profile = Staff(
                        first_name=registration.first_name,
                        last_name=registration.last_name,
                        department=registration.department,
                        specialization=registration.specialization,
                        contact_info=registration.contact_info,
                    )

        if is_client:
            self.mailer.send_welcome_email(user.email, user.full_name or user.email, code)
        return user

    def verify_user(self, email: str, code: str) -> dict:
        user = self._find_user(email)
        if user is None:
            raise ValidationError("Invalid email")

        record = self._find_unused_code(user, code)
        if record is None or record.is_expired():
            raise ValidationError("Invalid or expired code")

        with atomic():
            consumed = VerificationCode.query.filter_by(id=record.id, used=False).update(
                {"used": True}
            )
            if consumed != 1:
                raise ValidationError("Invalid or expired code")
            user.is_verified = True

        return {"message": "User verification successful"}

    def resend_verification(self, email: str) -> dict:
        user = self._find_user(email)
        if user is None or user.is_verified:
            return {"message": RESEND_MESSAGE}

        with atomic():
            code = self._issue_verification_code(user)

        self.mailer.send_welcome_email(user.email, user.full_name or user.email, code)
        return {"message": RESEND_MESSAGE}

    # -- sessions ----------------------------------------------------------

    def login(self, email: str, password: str) -> dict:
        user = self._find_user(email)
        if user is None:
            check_password_hash(_DUMMY_HASH, password)
            raise AuthenticationError("Invalid email or password.")
        if not user.check_password(password):
            raise AuthenticationError("Invalid email or password.")
        if not user.is_verified:
            raise AuthenticationError("Please verify your email before logging in.")

        access_token = self.generate_access_token(user)
        with atomic():
            refresh_token = self._issue_refresh_token(user)

        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "user": user.to_dict(),
        }

    def refresh(self, raw_token: str) -> dict:
        record = self._find_live_refresh_token(raw_token)
        if record is None:
            raise AuthenticationError("Invalid or expired refresh token")

        user = record.user
        with atomic():
            consumed = RefreshToken.query.filter_by(id=record.id, revoked=False).delete(
                synchronize_session=False
            )
            if consumed != 1:
                raise AuthenticationError("Invalid or expired refresh token")
            new_refresh_token = self._issue_refresh_token(user)

        return {
            "access_token": self.generate_access_token(user),
            "refresh_token": new_refresh_token,
        }

    def logout(self, raw_token: str) -> dict:
        record = self._find_live_refresh_token(raw_token)
        if record is not None:
            with atomic():
                record.revoked = True
        return {"message": "Logged out"}

    # -- password reset ----------------------------------------------------

    def request_password_reset(self, email: str) -> dict:
        user = self._find_user(email)
        if user is None:
            return {"message": RESET_REQUEST_MESSAGE}

        token = secrets.token_hex(32)
        with atomic():
            PasswordResetToken.query.filter_by(user_id=user.id, used=False).update(
                {"used": True}
            )
            db.session.add(
                PasswordResetToken(
                    user=user,
                    token_hash=hash_secret(token, "TOKEN_HASH_METHOD"),
                    expires_at=utcnow() + self.config["PASSWORD_RESET_TTL"],
                )
            )

        query = urlencode({"token": token, "email": user.email})
        reset_link = f"{self.config['FRONTEND_URL'].rstrip('/')}/reset-password?{query}"
        self.mailer.send_password_reset_email(user.email, reset_link)
        return {"message": RESET_REQUEST_MESSAGE}

    def reset_password(self, email: str, token: str, new_password: str) -> dict:
        user = self._find_user(email)
        if user is None:
            raise ValidationError("Invalid email")

        record = self._find_unused_reset_token(user)
        if record is None or record.is_expired():
            raise ValidationError("Invalid or expired token")
        if not record.matches(token):
            raise ValidationError("Invalid token")

        with atomic():
            consumed = PasswordResetToken.query.filter_by(id=record.id, used=False).update(
                {"used": True}
            )
            if consumed != 1:
                raise ValidationError("Invalid or expired token")
            user.set_password(new_password)

        return {"message": "Password update successful"}
