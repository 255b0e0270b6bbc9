from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_erp.core.exceptions import IdentityProviderError, ValidationFailed
from campus_erp.core.security import get_password_hash, verify_password
from campus_erp.models.user import User, UserRole

logger = logging.getLogger(__name__)


class IdentityProvider:
    """Owns login identities (the ``users`` table).

    Profiles never write to ``users`` directly; they go through this class so a
    failed profile write can be compensated by removing the identity again.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_identity(self, *, email: str, password: str, role: UserRole) -> User:
        normalized = email.strip().lower()
        if self.find_by_email(normalized) is not None:
            raise ValidationFailed("A user with this email address has already been registered")

        user = User(email=normalized, hashed_password=get_password_hash(password), role=role)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ValidationFailed("A user with this email address has already been registered") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to create %s identity for %s", role.value, normalized)
            raise IdentityProviderError("Failed to create login identity") from exc

        self.db.refresh(user)
        logger.info("Created %s identity %s", role.value, user.id)
        return user

    def delete_identity(self, user_id: str) -> None:
        user = self.db.get(User, user_id)
        if user is None:
            return
        self.db.delete(user)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to delete identity %s", user_id)
            raise IdentityProviderError("Failed to delete login identity") from exc
        logger.info("Deleted identity %s", user_id)

    def find_by_email(self, email: str) -> User | None:
        return self.db.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.find_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user

