"""Bearer-token guards for blueprints.

``flask_jwt_extended`` validates the token signature and expiry; the guards
here turn the decoded claims into an :class:`Identity` and apply role and
ownership rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Callable, Optional

from flask import request
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from werkzeug.exceptions import Forbidden

from models.user import ROLE_ADMIN


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as encoded in the access token."""

    user_id: int
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "role": self.role,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


def current_identity() -> Identity:
    """Return the identity of the verified access token on this request."""

    claims = get_jwt()
    return Identity(
        user_id=int(claims["sub"]),
        email=claims.get("email", ""),
        role=claims.get("role", ""),
        first_name=claims.get("first_name"),
        last_name=claims.get("last_name"),
    )


def authenticated(view: Callable) -> Callable:
    """Require a valid bearer access token."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: str) -> Callable[[Callable], Callable]:
    """Require a valid token whose role is one of ``roles``."""

    allowed = set(roles)

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if current_identity().role not in allowed:
                raise Forbidden("Insufficient permissions.")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def _requested_user_id(param: str, view_kwargs: dict) -> Optional[str]:
    value = view_kwargs.get(param)
    if value is None:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            value = body.get("user_id")
    return None if value is None else str(value)


def self_or_admin(param: str = "user_id") -> Callable[[Callable], Callable]:
    """Allow the owner of the ``param`` user id, or any admin."""

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            identity = current_identity()
            if not identity.is_admin and _requested_user_id(param, kwargs) != str(
                identity.user_id
            ):
                raise Forbidden("Insufficient permissions.")
            return view(*args, **kwargs)

        return wrapper

    return decorator
