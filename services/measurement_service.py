"""Body measurement records for clients."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from models import db, utcnow
from models.client_profile import ClientProfile
from models.measurement import MEASUREMENT_FIELDS, Measurement
from utils.request_validation import parse_datetime, parse_decimal

from . import atomic
from .errors import ConflictError, NotFoundError

DEFAULT_LIMIT = 50


def _has_measurement_on(client_id: int, moment: datetime, exclude_id: Optional[int] = None) -> bool:
    start, end = Measurement.day_bounds(moment)
    query = Measurement.query.filter(
        Measurement.client_id == client_id,
        Measurement.date >= start,
        Measurement.date < end,
    )
    if exclude_id is not None:
        query = query.filter(Measurement.id != exclude_id)
    return db.session.query(query.exists()).scalar()


class MeasurementService:
    def client_for_user(self, user_id: int) -> ClientProfile:
        client = ClientProfile.query.filter_by(user_id=user_id).first()
        if client is None:
            raise NotFoundError("Client not found")
        return client

    def create_measurement(self, client: ClientProfile, data: Mapping[str, Any]) -> Measurement:
        moment = parse_datetime(data.get("date"), "date") or utcnow()
        if _has_measurement_on(client.id, moment):
            raise ConflictError("Measurement already exists for this date")

        measurement = Measurement(client_id=client.id, date=moment, notes=data.get("notes"))
        for field in MEASUREMENT_FIELDS:
            setattr(measurement, field, parse_decimal(data.get(field), field))

        with atomic():
            db.session.add(measurement)
        return measurement

    def get_measurement(self, client: ClientProfile, measurement_id: int) -> Measurement:
        measurement = Measurement.query.filter_by(id=measurement_id, client_id=client.id).first()
        if measurement is None:
            raise NotFoundError("Measurement not found")
        return measurement

    def list_measurements(
        self,
        client: ClientProfile,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> dict:
        query = Measurement.query.filter(Measurement.client_id == client.id)
        if start_date is not None:
            query = query.filter(Measurement.date >= start_date)
        if end_date is not None:
            query = query.filter(Measurement.date <= end_date)

        total = query.count()
        measurements = (
            query.order_by(Measurement.date.desc()).offset(offset).limit(limit).all()
        )
        return {
            "measurements": [measurement.to_dict() for measurement in measurements],
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "has_more": total > offset + len(measurements),
            },
        }

    def latest_measurement(self, client: ClientProfile) -> Measurement:
        measurement = (
            Measurement.query.filter_by(client_id=client.id)
            .order_by(Measurement.date.desc())
            .first()
        )
        if measurement is None:
            raise NotFoundError("No measurements recorded")
        return measurement

    def update_measurement(
        self, client: ClientProfile, measurement_id: int, data: Mapping[str, Any]
    ) -> Measurement:
        measurement = self.get_measurement(client, measurement_id)

        moment = parse_datetime(data.get("date"), "date")
        if moment is not None and moment.date() != measurement.date.date():
            if _has_measurement_on(client.id, moment, exclude_id=measurement.id):
                raise ConflictError("Another measurement already exists for this date")

        with atomic():
            if moment is not None:
                measurement.date = moment
            for field in MEASUREMENT_FIELDS:
                if field in data:
                    setattr(measurement, field, parse_decimal(data[field], field))
            if "notes" in data:
                measurement.notes = data["notes"]
        return measurement

    def delete_measurement(self, client: ClientProfile, measurement_id: int) -> None:
        measurement = self.get_measurement(client, measurement_id)
        with atomic():
            db.session.delete(measurement)
