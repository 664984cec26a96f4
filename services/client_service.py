"""Client profile management."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import func, or_

from models import db
from models.client_profile import GENDERS, ClientProfile
from models.staff import Staff
from utils.request_validation import parse_bool, parse_date, parse_decimal

from . import atomic
from .errors import ConflictError, NotFoundError, ValidationError

PROFILE_TEXT_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "address",
    "emergency_contact_name",
    "emergency_contact_phone",
    "emergency_contact_relation",
    "occupation",
)
SEARCH_LIMIT = 20


def _apply_profile_fields(profile: ClientProfile, data: Mapping[str, Any]) -> None:
    for field in PROFILE_TEXT_FIELDS:
        if field in data:
            if data[field] is not None and not isinstance(data[field], str):
                raise ValidationError(f"{field} must be a string.")
            setattr(profile, field, data[field])

    if "date_of_birth" in data:
        profile.date_of_birth = parse_date(data["date_of_birth"], "date_of_birth")
    if "gender" in data:
        if data["gender"] is not None and not isinstance(data["gender"], str):
            raise ValidationError("gender must be a string.")
        gender = (data["gender"] or "").upper() or None
        if gender is not None and gender not in GENDERS:
            raise ValidationError(f"gender must be one of: {', '.join(GENDERS)}.")
        profile.gender = gender
    for flag in ("alcohol_consumption", "smoking_status"):
        if flag in data:
            setattr(profile, flag, parse_bool(data[flag]))
    if "target_weight" in data:
        profile.target_weight = parse_decimal(data["target_weight"], "target_weight")
    if "assigned_trainer_id" in data:
        trainer_id = data["assigned_trainer_id"]
        if trainer_id is not None and db.session.get(Staff, trainer_id) is None:
            raise ValidationError("Trainer not found")
        profile.assigned_trainer_id = trainer_id


class ClientService:
    def create_profile(self, user_id: int, data: Mapping[str, Any]) -> ClientProfile:
        if ClientProfile.query.filter_by(user_id=user_id).first() is not None:
            raise ConflictError("Client profile already exists")

        profile = ClientProfile(user_id=user_id)
        with atomic():
            _apply_profile_fields(profile, data)
            db.session.add(profile)
        return profile

    def get_profile(self, user_id: int) -> ClientProfile:
        profile = ClientProfile.query.filter_by(user_id=user_id).first()
        if profile is None:
            raise NotFoundError("Client profile not found")
        return profile

    def update_profile(self, user_id: int, data: Mapping[str, Any]) -> ClientProfile:
        profile = self.get_profile(user_id)
        for field in ("first_name", "last_name"):
            if field in data and not data[field]:
                raise ValidationError(f"{field} must not be empty.")
        with atomic():
            _apply_profile_fields(profile, data)
        return profile

    def list_clients(self, page: int = 1, limit: int = 20) -> dict:
        total = ClientProfile.query.count()
        clients = (
            ClientProfile.query.order_by(ClientProfile.created_at.desc(), ClientProfile.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "clients": [client.to_dict(include_user=True) for client in clients],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": -(-total // limit),
            },
        }

    def search_clients(self, query: str) -> list[ClientProfile]:
        like = f"%{query.lower()}%"
        return (
            ClientProfile.query.filter(
                or_(
                    func.lower(ClientProfile.first_name).like(like),
                    func.lower(ClientProfile.last_name).like(like),
                    func.lower(ClientProfile.phone).like(like),
                )
            )
            .limit(SEARCH_LIMIT)
            .all()
        )
