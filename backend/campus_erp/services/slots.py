from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_erp.core.exceptions import SlotConflictError
from campus_erp.models.timetable import TimetableSlot, Weekday

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Timetable conflict: This section already has a class scheduled for this day and period"


def has_conflict(
    db: Session,
    section_id: str,
    day: Weekday | str,
    period: int,
    exclude_slot_id: str | None = None,
) -> bool:
    """Return True when ``section_id`` already has a slot on ``day``/``period``.

    ``exclude_slot_id`` lets an update ignore the slot being edited. This is a
    plain read: two concurrent creates for the same triple can both pass.
    """
    statement = select(TimetableSlot.id).where(
        TimetableSlot.section_id == section_id,
        TimetableSlot.day == Weekday(day),
        TimetableSlot.period == period,
    )
    if exclude_slot_id:
        statement = statement.where(TimetableSlot.id != exclude_slot_id)
    return db.execute(statement.limit(1)).first() is not None


def ensure_slot_available(
    db: Session,
    section_id: str,
    day: Weekday | str,
    period: int,
    exclude_slot_id: str | None = None,
) -> None:
    if has_conflict(db, section_id, day, period, exclude_slot_id):
        logger.info(
            "Rejected timetable slot for section=%s day=%s period=%s (exclude=%s)",
            section_id,
            Weekday(day).value,
            period,
            exclude_slot_id,
        )
        raise SlotConflictError(
            CONFLICT_MESSAGE,
            details={"section_id": section_id, "day": Weekday(day).value, "period": period},
        )


def needs_recheck(changes: dict) -> bool:
    # Only a payload carrying the full (section, day, period) triple is re-checked;
    # faculty/subject-only edits go straight through.
    return all(changes.get(key) is not None for key in ("section_id", "day", "period"))
