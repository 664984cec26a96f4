"""Staff profile management."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from models import db
from models.client_profile import ClientProfile
from models.staff import DEPARTMENTS, Staff
from models.user import User
from utils.request_validation import parse_bool

from . import atomic
from .errors import ConflictError, NotFoundError, ValidationError

STAFF_FIELDS = ("first_name", "last_name", "department", "specialization", "contact_info")


def _validated(data: Mapping[str, Any]) -> dict:
    values = {field: data[field] for field in STAFF_FIELDS if field in data}
    if "department" in values:
        department = str(values["department"] or "").upper()
        if department not in DEPARTMENTS:
            raise ValidationError(f"Department must be one of: {', '.join(DEPARTMENTS)}.")
        values["department"] = department
    return values


class StaffService:
    def create_staff(self, user_id: int, data: Mapping[str, Any]) -> Staff:
        if Staff.query.filter_by(user_id=user_id).first() is not None:
            raise ConflictError("Staff profile already exists")

        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")

        values = _validated(data)
        with atomic():
            user.first_name = values["first_name"]
            user.last_name = values["last_name"]
            staff = Staff(user_id=user.id, **values)
            db.session.add(staff)
        return staff

    def get_staff(self, staff_id: int) -> Staff:
        staff = db.session.get(Staff, staff_id)
        if staff is None:
            raise NotFoundError("Staff not found")
        return staff

    def update_staff(self, staff_id: int, data: Mapping[str, Any]) -> Staff:
        staff = self.get_staff(staff_id)
        values = _validated(data)
        is_active = parse_bool(data.get("is_active"))
        if "is_active" in data and is_active is None:
            raise ValidationError("is_active must be boolean.")
        with atomic():
            for field, value in values.items():
                setattr(staff, field, value)
            if "is_active" in data:
                staff.is_active = is_active
        return staff

    def set_active(self, staff_id: int, active: bool) -> Staff:
        staff = self.get_staff(staff_id)
        with atomic():
            staff.is_active = active
        return staff

    def list_staff(self, department: Optional[str] = None, active_only: bool = True) -> list[Staff]:
        query = Staff.query
        if department:
            department = department.upper()
            if department not in DEPARTMENTS:
                raise ValidationError(f"Department must be one of: {', '.join(DEPARTMENTS)}.")
            query = query.filter(Staff.department == department)
        if active_only:
            query = query.filter(Staff.is_active.is_(True))
        return query.order_by(Staff.created_at.desc(), Staff.id.desc()).all()

    def staff_clients(self, staff_id: int) -> list[ClientProfile]:
        self.get_staff(staff_id)
        return (
            ClientProfile.query.filter_by(assigned_trainer_id=staff_id)
            .order_by(ClientProfile.last_name.asc(), ClientProfile.first_name.asc())
            .all()
        )
