"""Staff profile model."""

from . import db, utcnow


DEPARTMENTS = ("TRAINING", "NUTRITION", "PHYSIOTHERAPY", "MANAGEMENT")


class Staff(db.Model):
    """Profile attached to trainer and admin accounts."""

    __tablename__ = "staff"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True
    )
    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    department = db.Column(db.Enum(*DEPARTMENTS, name="staff_department"), nullable=False)
    specialization = db.Column(db.String(255), nullable=True)
    contact_info = db.Column(db.String(255), nullable=False)
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.text("true"),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="staff_profile")
    clients = db.relationship(
        "ClientProfile",
        back_populates="assigned_trainer",
    )

    def to_dict(self, include_user: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "department": self.department,
            "specialization": self.specialization,
            "contact_info": self.contact_info,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_user and self.user is not None:
            data["user"] = {
                "email": self.user.email,
                "role": self.user.role,
                "is_verified": self.user.is_verified,
            }
        return data

    def summary(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "department": self.department,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Staff id={self.id} department={self.department}>"
