"""Persisted one-time credentials: refresh tokens, verification codes and reset tokens."""

from datetime import datetime
from typing import Optional

from werkzeug.security import check_password_hash

from . import db, utcnow


class _ExpiringMixin:
    """Shared expiry helpers for token-like records."""

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return self.expires_at <= now


class RefreshToken(_ExpiringMixin, db.Model):
    """A refresh token, stored only as a salted hash of the issued secret."""

    __tablename__ = "refresh_tokens"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash = db.Column(db.String(255), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    revoked = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="refresh_tokens")

    def matches(self, raw_token: str) -> bool:
        return check_password_hash(self.token_hash, raw_token)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "revoked": self.revoked,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<RefreshToken id={self.id} user_id={self.user_id}>"


class VerificationCode(_ExpiringMixin, db.Model):
    """Numeric email verification code; consumed exactly once."""

    __tablename__ = "verification_codes"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code = db.Column(db.String(10), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    used = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="verification_codes")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<VerificationCode id={self.id} user_id={self.user_id} used={self.used}>"


class PasswordResetToken(_ExpiringMixin, db.Model):
    """Password reset secret, hashed at rest and consumed exactly once."""

    __tablename__ = "password_reset_tokens"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash = db.Column(db.String(255), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    used = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="password_resets")

    def matches(self, raw_token: str) -> bool:
        return check_password_hash(self.token_hash, raw_token)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<PasswordResetToken id={self.id} user_id={self.user_id} used={self.used}>"
