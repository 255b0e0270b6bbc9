"""Create (or reactivate) the first admin login so the admin panel can be reached.

Run:
  PYTHONPATH=backend python scripts/seed_admin.py
"""

from __future__ import annotations

import os

from campus_erp.core.security import get_password_hash
from campus_erp.db.bootstrap import ensure_runtime_schema
from campus_erp.db.session import SessionLocal
from campus_erp.models.user import User, UserRole
from campus_erp.services.identity import IdentityProvider

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@college.edu").strip().lower()
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe123!")


def _upsert_admin(*, email: str, password: str) -> User:
    with SessionLocal() as session:
        identities = IdentityProvider(session)
        existing = identities.find_by_email(email)
        if existing is None:
            return identities.create_identity(email=email, password=password, role=UserRole.admin)
        existing.role = UserRole.admin
        existing.hashed_password = get_password_hash(password)
        existing.is_active = True
        session.commit()
        session.refresh(existing)
        return existing


def main() -> None:
    ensure_runtime_schema()
    admin = _upsert_admin(email=ADMIN_EMAIL, password=ADMIN_PASSWORD)
    print("Seeded admin account:")
    print(f"  {admin.email} (id={admin.id})")
    print(f"  password: {ADMIN_PASSWORD}")


if __name__ == "__main__":
    main()
