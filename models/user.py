"""User model definition."""

from typing import Optional

from flask import current_app, has_app_context
from werkzeug.security import check_password_hash, generate_password_hash

from . import db, utcnow


ROLE_CLIENT = "CLIENT"
ROLE_TRAINER = "TRAINER"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_CLIENT, ROLE_TRAINER, ROLE_ADMIN)
STAFF_ROLES = (ROLE_TRAINER, ROLE_ADMIN)


def hash_secret(secret: str, config_key: str = "PASSWORD_HASH_METHOD") -> str:
    """Hash a secret with the werkzeug method configured under ``config_key``."""

    method = current_app.config.get(config_key) if has_app_context() else None
    if method:
        return generate_password_hash(secret, method=method)
    return generate_password_hash(secret)


class User(db.Model):
    """Represents a gym member, trainer or administrator account."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)
    role = db.Column(
        db.Enum(*ROLES, name="user_role"),
        nullable=False,
        default=ROLE_CLIENT,
        server_default=db.text("'CLIENT'"),
    )
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    refresh_tokens = db.relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    verification_codes = db.relationship(
        "VerificationCode",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    password_resets = db.relationship(
        "PasswordResetToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    client_profile = db.relationship(
        "ClientProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    staff_profile = db.relationship(
        "Staff",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def full_name(self) -> Optional[str]:
        names = [name for name in (self.first_name, self.last_name) if name]
        return " ".join(names) or None

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = hash_secret(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    def to_dict(self, include_profile: bool = False) -> dict:
        """Serialize the user, optionally with its role-specific profile."""

        data = {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "is_verified": self.is_verified,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_profile:
            data["client_profile"] = (
                self.client_profile.to_dict() if self.client_profile else None
            )
            data["staff_profile"] = (
                self.staff_profile.to_dict() if self.staff_profile else None
            )
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email} role={self.role}>"
