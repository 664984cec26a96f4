"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(", ".join(sorted(missing)))
            )

    return data


def require_strings(data: dict, *keys: str) -> None:
    """Reject present values of ``keys`` that are not JSON strings."""

    wrong = [key for key in keys if key in data and not isinstance(data[key], str)]
    if wrong:
        raise BadRequest(
            "Fields must be strings: {}.".format(", ".join(sorted(wrong)))
        )


def parse_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return None


def parse_int(value: Any, field: str, *, default: int, minimum: int = 0) -> int:
    """Parse a query-string integer, falling back to ``default`` when absent."""

    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{field} must be an integer.")
    if number < minimum:
        raise BadRequest(f"{field} must be at least {minimum}.")
    return number


def parse_decimal(value: Any, field: str) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise BadRequest(f"{field} must be numeric.")
    if not number.is_finite():
        raise BadRequest(f"{field} must be numeric.")
    return number


def parse_datetime(value: Any, field: str) -> Optional[datetime]:
    """Parse an ISO 8601 date or datetime; timezone-aware values are made naive."""

    if value in (None, ""):
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise BadRequest(f"{field} must be ISO 8601 format.")
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - parsed.utcoffset()
    return parsed


def parse_date(value: Any, field: str) -> Optional[date]:
    parsed = parse_datetime(value, field)
    return parsed.date() if parsed else None
