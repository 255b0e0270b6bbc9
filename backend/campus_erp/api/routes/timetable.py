import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_erp.api.deps import Principal, get_db, get_principal, require_roles
from campus_erp.core.exceptions import ResourceNotFoundError, ValidationFailed
from campus_erp.models.faculty import Faculty
from campus_erp.models.section import Section
from campus_erp.models.subject import Subject
from campus_erp.models.timetable import TimetableSlot
from campus_erp.models.user import UserRole
from campus_erp.schemas.common import DeleteResult
from campus_erp.schemas.timetable import TimetableSlotCreate, TimetableSlotOut, TimetableSlotUpdate
from campus_erp.services.access import require_identifier
from campus_erp.services.audit import log_activity
from campus_erp.services.directory import slot_outs
from campus_erp.services.slots import ensure_slot_available, needs_recheck

router = APIRouter()
logger = logging.getLogger(__name__)
admin_only = require_roles(UserRole.admin)

REFERENCES = (
    ("section_id", Section, "Section"),
    ("subject_id", Subject, "Subject"),
    ("faculty_id", Faculty, "Faculty"),
)


def _check_references(db: Session, values: dict) -> None:
    for field, model, label in REFERENCES:
        value = values.get(field)
        if value is None:
            continue
        require_identifier(value, f"Invalid {label.lower()} ID")
        if db.get(model, value) is None:
            raise ValidationFailed(f"{label} does not exist")


@router.get("", response_model=list[TimetableSlotOut])
def list_timetable(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)) -> list[TimetableSlotOut]:
    return slot_outs(db, list(db.execute(select(TimetableSlot)).scalars()))


@router.get("/section/{section_id}", response_model=list[TimetableSlotOut])
def section_timetable(
    section_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[TimetableSlotOut]:
    slots = db.execute(select(TimetableSlot).where(TimetableSlot.section_id == section_id)).scalars()
    return slot_outs(db, list(slots))


@router.post("", response_model=TimetableSlotOut, status_code=status.HTTP_201_CREATED)
def create_slot(
    payload: TimetableSlotCreate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    values = payload.model_dump()
    _check_references(db, values)
    ensure_slot_available(db, payload.section_id, payload.day, payload.period)

    slot = TimetableSlot(**values)
    db.add(slot)
    db.flush()
    log_activity(
        db,
        actor_id=principal.id,
        action="timetable.create",
        entity_type="timetable",
        entity_id=slot.id,
        details={"section_id": slot.section_id, "day": slot.day.value, "period": slot.period},
    )
    db.commit()
    db.refresh(slot)
    logger.info(
        "Created timetable slot %s: section=%s subject=%s faculty=%s %s P%s",
        slot.id,
        slot.section_id,
        slot.subject_id,
        slot.faculty_id,
        slot.day.value,
        slot.period,
    )
    return slot_outs(db, [slot])[0]


@router.put("/{slot_id}", response_model=TimetableSlotOut)
def update_slot(
    slot_id: str,
    payload: TimetableSlotUpdate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    slot = db.get(TimetableSlot, slot_id)
    if slot is None:
        raise ResourceNotFoundError("Timetable entry not found")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    _check_references(db, changes)
    if needs_recheck(changes):
        ensure_slot_available(db, changes["section_id"], changes["day"], changes["period"], exclude_slot_id=slot_id)

    for key, value in changes.items():
        setattr(slot, key, value)
    if changes:
        log_activity(
            db,
            actor_id=principal.id,
            action="timetable.update",
            entity_type="timetable",
            entity_id=slot_id,
            details={"fields": sorted(changes)},
        )
    db.commit()
    db.refresh(slot)
    logger.info("Updated timetable slot %s (%s)", slot_id, ", ".join(sorted(changes)) or "no changes")
    return slot_outs(db, [slot])[0]


@router.delete("/{slot_id}", response_model=DeleteResult)
def delete_slot(
    slot_id: str,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> DeleteResult:
    slot = db.get(TimetableSlot, slot_id)
    if slot is None:
        raise ResourceNotFoundError("Timetable entry not found")
    log_activity(db, actor_id=principal.id, action="timetable.delete", entity_type="timetable", entity_id=slot_id)
    db.delete(slot)
    db.commit()
    logger.info("Deleted timetable slot %s", slot_id)
    return DeleteResult()
