from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_erp.core.config import get_settings
from campus_erp.core.exceptions import Forbidden, ResourceNotFoundError, ValidationFailed
from campus_erp.models.faculty import Faculty
from campus_erp.models.timetable import TimetableSlot

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
NOT_ASSIGNED_MESSAGE = (
    "You are not assigned to teach this section. "
    "Please contact your administrator to assign you to this class."
)


@dataclass(frozen=True)
class FacultyAccess:
    faculty_id: str
    section_id: str
    subject_ids: tuple[str, ...]


def is_valid_identifier(value: str | None) -> bool:
    if not value or not isinstance(value, str):
        return False
    if value in {"undefined", "null"}:
        return False
    return bool(UUID_PATTERN.match(value))


def require_identifier(value: str | None, message: str) -> str:
    if not is_valid_identifier(value):
        logger.warning("Rejected malformed identifier %r", value)
        raise ValidationFailed(message)
    return value


def resolve_faculty(db: Session, user_id: str) -> Faculty:
    faculty = db.execute(select(Faculty).where(Faculty.user_id == user_id)).scalar_one_or_none()
    if faculty is None:
        logger.warning("No faculty profile found for user_id=%s", user_id)
        raise ResourceNotFoundError("Faculty profile not found")
    return faculty


def authorize_faculty_for_section(db: Session, user_id: str, section_id: str) -> FacultyAccess:
    """Allow a faculty identity through only if it has a timetable slot in ``section_id``."""
    require_identifier(section_id, "Invalid section ID. Please select a valid class from the dropdown.")
    faculty = resolve_faculty(db, user_id)

    limit = max(1, get_settings().faculty_assignment_check_limit)
    subject_ids = list(
        db.execute(
            select(TimetableSlot.subject_id)
            .where(TimetableSlot.faculty_id == faculty.id, TimetableSlot.section_id == section_id)
            .limit(limit)
        ).scalars()
    )
    if not subject_ids:
        logger.warning("Faculty %s is not assigned to section %s", faculty.id, section_id)
        raise Forbidden(NOT_ASSIGNED_MESSAGE)

    return FacultyAccess(
        faculty_id=faculty.id,
        section_id=section_id,
        subject_ids=tuple(dict.fromkeys(subject_ids)),
    )
