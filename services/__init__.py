"""Service layer: ORM queries and business rules behind the blueprints."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from models import db


@contextmanager
def atomic() -> Iterator[Session]:
    """Commit everything staged inside the block as one transaction, or nothing."""

    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
