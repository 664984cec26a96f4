"""Client profile model."""

from decimal import Decimal

from . import db, utcnow


GENDERS = ("MALE", "FEMALE", "OTHER")


class ClientProfile(db.Model):
    """Personal and emergency details of a gym client."""

    __tablename__ = "client_profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True
    )
    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(40), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    gender = db.Column(db.Enum(*GENDERS, name="client_gender"), nullable=True)
    emergency_contact_name = db.Column(db.String(120), nullable=True)
    emergency_contact_phone = db.Column(db.String(40), nullable=True)
    emergency_contact_relation = db.Column(db.String(60), nullable=True)
    occupation = db.Column(db.String(120), nullable=True)
    alcohol_consumption = db.Column(db.Boolean, nullable=True)
    smoking_status = db.Column(db.Boolean, nullable=True)
    target_weight = db.Column(db.Numeric(6, 2), nullable=True)
    assigned_trainer_id = db.Column(
        db.Integer, db.ForeignKey("staff.id"), nullable=True, index=True
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="client_profile")
    assigned_trainer = db.relationship("Staff", back_populates="clients")
    measurements = db.relationship(
        "Measurement",
        back_populates="client",
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_user: bool = False) -> dict:
        """Serialize the profile into a dictionary."""

        target_weight = (
            float(self.target_weight)
            if isinstance(self.target_weight, Decimal)
            else self.target_weight
        )
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "address": self.address,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "gender": self.gender,
            "emergency_contact_name": self.emergency_contact_name,
            "emergency_contact_phone": self.emergency_contact_phone,
            "emergency_contact_relation": self.emergency_contact_relation,
            "occupation": self.occupation,
            "alcohol_consumption": self.alcohol_consumption,
            "smoking_status": self.smoking_status,
            "target_weight": target_weight,
            "assigned_trainer": self.assigned_trainer.summary()
            if self.assigned_trainer
            else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_user and self.user is not None:
            data["user"] = {
                "email": self.user.email,
                "created_at": self.user.created_at.isoformat()
                if self.user.created_at
                else None,
            }
        return data

    def __repr__(self) -> str:  # pragma: no cover
        return f"<ClientProfile id={self.id} user_id={self.user_id}>"
