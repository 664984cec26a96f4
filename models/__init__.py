"""Database initialization and model exports."""

from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, matching stored columns."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .tokens import PasswordResetToken, RefreshToken, VerificationCode  # noqa: E402,F401
from .staff import Staff  # noqa: E402,F401
from .client_profile import ClientProfile  # noqa: E402,F401
from .measurement import Measurement  # noqa: E402,F401

__all__ = [
    "db",
    "utcnow",
    "User",
    "RefreshToken",
    "VerificationCode",
    "PasswordResetToken",
    "Staff",
    "ClientProfile",
    "Measurement",
]
