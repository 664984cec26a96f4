"""Administrative user management."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping, Optional

from sqlalchemy import func, or_

from models import db, utcnow
from models.tokens import RefreshToken
from models.user import ROLE_ADMIN, ROLE_CLIENT, ROLE_TRAINER, ROLES, User

from . import atomic
from .errors import NotFoundError, ValidationError

UPDATABLE_FIELDS = ("first_name", "last_name", "role", "is_verified")
SEARCH_LIMIT = 20


class UserService:
    def list_users(self, role: Optional[str] = None, verified: Optional[bool] = None) -> list[User]:
        query = User.query
        if role:
            if role not in ROLES:
                raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")
            query = query.filter(User.role == role)
        if verified is not None:
            query = query.filter(User.is_verified.is_(verified))
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    def get_user(self, user_id: int) -> User:
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_user(self, user_id: int, data: Mapping[str, Any]) -> User:
        user = self.get_user(user_id)
        if "role" in data and data["role"] not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")
        if "is_verified" in data and not isinstance(data["is_verified"], bool):
            raise ValidationError("is_verified must be boolean.")

        with atomic():
            for field in UPDATABLE_FIELDS:
                if field in data:
                    setattr(user, field, data[field])
        return user

    def delete_user(self, user_id: int) -> None:
        user = self.get_user(user_id)
        with atomic():
            db.session.delete(user)

    def revoke_refresh_tokens(self, user_id: int) -> dict:
        self.get_user(user_id)
        with atomic():
            RefreshToken.query.filter_by(user_id=user_id).delete()
        return {"message": "All refresh tokens revoked"}

    def search_users(self, query: str) -> list[User]:
        like = f"%{query.lower()}%"
        return (
            User.query.filter(
                or_(
                    func.lower(User.email).like(like),
                    func.lower(User.first_name).like(like),
                    func.lower(User.last_name).like(like),
                )
            )
            .order_by(User.email.asc())
            .limit(SEARCH_LIMIT)
            .all()
        )

    def user_stats(self) -> dict:
        total = User.query.count()
        verified = User.query.filter(User.is_verified.is_(True)).count()
        recent = User.query.filter(User.created_at >= utcnow() - timedelta(days=30)).count()
        return {
            "total_users": total,
            "by_role": {
                "clients": User.query.filter_by(role=ROLE_CLIENT).count(),
                "trainers": User.query.filter_by(role=ROLE_TRAINER).count(),
                "admins": User.query.filter_by(role=ROLE_ADMIN).count(),
            },
            "verified_users": verified,
            "unverified_users": total - verified,
            "recent_users": recent,
        }
