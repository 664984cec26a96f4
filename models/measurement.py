"""Body measurement model."""

from datetime import datetime, timedelta
from decimal import Decimal

from . import db, utcnow


MEASUREMENT_FIELDS = ("weight", "chest", "waist", "hips", "biceps", "thighs")


class Measurement(db.Model):
    """A dated set of body measurements for a client."""

    __tablename__ = "measurements"

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(
        db.Integer,
        db.ForeignKey("client_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = db.Column(db.DateTime, nullable=False, default=utcnow)
    weight = db.Column(db.Numeric(6, 2), nullable=True)
    chest = db.Column(db.Numeric(6, 2), nullable=True)
    waist = db.Column(db.Numeric(6, 2), nullable=True)
    hips = db.Column(db.Numeric(6, 2), nullable=True)
    biceps = db.Column(db.Numeric(6, 2), nullable=True)
    thighs = db.Column(db.Numeric(6, 2), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    client = db.relationship("ClientProfile", back_populates="measurements")

    @staticmethod
    def day_bounds(moment: datetime) -> tuple[datetime, datetime]:
        """Return the [start, end) datetimes of the calendar day containing ``moment``."""

        start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        return start, start + timedelta(days=1)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "client_id": self.client_id,
            "date": self.date.isoformat() if self.date else None,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        for field in MEASUREMENT_FIELDS:
            value = getattr(self, field)
            data[field] = float(value) if isinstance(value, Decimal) else value
        return data

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Measurement id={self.id} client_id={self.client_id}>"
