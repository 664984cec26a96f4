"""Seed an administrator account with a staff profile."""

import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app  # noqa: E402
from models import db  # noqa: E402
from models.staff import Staff  # noqa: E402
from models.user import ROLE_ADMIN, User  # noqa: E402

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        admin = User.query.filter_by(email=ADMIN_EMAIL).first()
        if admin is None:
            admin = User(
                email=ADMIN_EMAIL,
                first_name="Gym",
                last_name="Admin",
                role=ROLE_ADMIN,
                is_verified=True,
            )
            db.session.add(admin)
            action = "created"
        else:
            admin.role = ROLE_ADMIN
            admin.is_verified = True
            action = "updated"
        admin.set_password(ADMIN_PASSWORD)

        if admin.staff_profile is None:
            admin.staff_profile = Staff(
                first_name=admin.first_name or "Gym",
                last_name=admin.last_name or "Admin",
                department="MANAGEMENT",
                contact_info=ADMIN_EMAIL,
            )
        db.session.commit()
        print(f"Admin user {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
