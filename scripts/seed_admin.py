"""Seed an administrator user."""

import os

from app import create_app
from models.user import Role
from services import get_services

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123!")


def main() -> None:
    app = create_app()
    with app.app_context():
        services = get_services()
        admin = services.store.find_by_email(ADMIN_EMAIL)
        if admin is None:
            admin = services.store.create(
                email=ADMIN_EMAIL,
                password=ADMIN_PASSWORD,
                first_name="Echo",
                last_name="Admin",
                role=Role.ADMIN,
            )
            action = "created"
        else:
            admin.role = Role.ADMIN
            admin.is_active = True
            services.lockout.record_success(admin)
            services.store.save(admin)
            services.store.update_password(admin, ADMIN_PASSWORD)
            action = "updated"
        print(f"Admin user {action}: {admin.email}")


if __name__ == "__main__":
    main()
