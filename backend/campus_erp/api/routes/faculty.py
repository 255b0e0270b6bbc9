import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_erp.api.deps import Principal, get_db, require_roles
from campus_erp.core.exceptions import Forbidden, ValidationFailed
from campus_erp.models.attendance import AttendanceRecord
from campus_erp.models.marks import MarksRecord
from campus_erp.models.student import Student
from campus_erp.models.subject import Subject
from campus_erp.models.timetable import TimetableSlot
from campus_erp.models.user import UserRole
from campus_erp.schemas.records import (
    AttendanceBatch,
    AttendanceOut,
    BatchResult,
    ClassSheetOut,
    MarksBatch,
    MarksOut,
)
from campus_erp.schemas.student import StudentRosterOut
from campus_erp.schemas.timetable import FacultyClassOut
from campus_erp.services.access import (
    NOT_ASSIGNED_MESSAGE,
    authorize_faculty_for_section,
    resolve_faculty,
)
from campus_erp.services.class_selector import decode_class_key, encode_class_key
from campus_erp.services.directory import section_briefs, sort_slots, student_briefs, subject_briefs
from campus_erp.services.grades import derive_grade, total_marks

router = APIRouter()
logger = logging.getLogger(__name__)
faculty_only = require_roles(UserRole.faculty)


def _roster(db: Session, section_id: str) -> list[Student]:
    return list(
        db.execute(select(Student).where(Student.section_id == section_id).order_by(Student.roll_no.asc())).scalars()
    )


def _marks_out(db: Session, records: list[MarksRecord]) -> list[MarksOut]:
    students = student_briefs(db, (item.student_id for item in records))
    return [
        MarksOut(
            id=item.id,
            internal1=item.internal1,
            internal2=item.internal2,
            external=item.external,
            total=total_marks(item),
            grade=derive_grade(total_marks(item)),
            student=students.get(item.student_id),
        )
        for item in records
    ]


def _authorize_batch(db: Session, principal: Principal, student_ids: set[str], subject_ids: set[str]) -> None:
    """Gate a write batch on every section its students belong to."""
    resolve_faculty(db, principal.id)

    known_subjects = set(db.execute(select(Subject.id).where(Subject.id.in_(subject_ids))).scalars())
    missing_subjects = subject_ids - known_subjects
    if missing_subjects:
        raise ValidationFailed(f"Unknown subject_id: {sorted(missing_subjects)[0]}")

    students = {
        item.id: item for item in db.execute(select(Student).where(Student.id.in_(student_ids))).scalars()
    }
    missing_students = student_ids - set(students)
    if missing_students:
        raise ValidationFailed(f"Unknown student_id: {sorted(missing_students)[0]}")

    section_ids = {item.section_id for item in students.values()}
    if None in section_ids:
        raise Forbidden(NOT_ASSIGNED_MESSAGE)
    for section_id in sorted(section_ids):
        authorize_faculty_for_section(db, principal.id, section_id)


@router.get("/classes", response_model=list[FacultyClassOut])
def assigned_classes(principal: Principal = Depends(faculty_only), db: Session = Depends(get_db)) -> list[FacultyClassOut]:
    faculty = resolve_faculty(db, principal.id)
    slots = sort_slots(db.execute(select(TimetableSlot).where(TimetableSlot.faculty_id == faculty.id)).scalars())
    sections = section_briefs(db, (slot.section_id for slot in slots))
    subjects = subject_briefs(db, (slot.subject_id for slot in slots))
    logger.info("Faculty %s has %d assigned slots", faculty.id, len(slots))
    return [
        FacultyClassOut(
            id=slot.id,
            day=slot.day,
            period=slot.period,
            section_id=slot.section_id,
            subject_id=slot.subject_id,
            class_key=encode_class_key(slot.section_id, slot.subject_id),
            section=sections.get(slot.section_id),
            subject=subjects.get(slot.subject_id),
        )
        for slot in slots
    ]


@router.get("/students/{section_id}", response_model=list[StudentRosterOut])
def section_students(
    section_id: str,
    principal: Principal = Depends(faculty_only),
    db: Session = Depends(get_db),
) -> list[StudentRosterOut]:
    access = authorize_faculty_for_section(db, principal.id, section_id)
    students = _roster(db, access.section_id)
    logger.info("Loaded %d students for section %s", len(students), section_id)
    return students


@router.get("/class-sheet", response_model=ClassSheetOut)
def class_sheet(
    class_key: str | None = Query(default=None),
    principal: Principal = Depends(faculty_only),
    db: Session = Depends(get_db),
) -> ClassSheetOut:
    section_id, subject_id = decode_class_key(class_key).require()
    access = authorize_faculty_for_section(db, principal.id, section_id)

    students = _roster(db, access.section_id)
    student_ids = [item.id for item in students]
    marks = []
    if student_ids:
        marks = list(
            db.execute(
                select(MarksRecord).where(
                    MarksRecord.subject_id == subject_id,
                    MarksRecord.student_id.in_(student_ids),
                )
            ).scalars()
        )
    return ClassSheetOut(
        section_id=section_id,
        subject_id=subject_id,
        class_key=encode_class_key(section_id, subject_id),
        students=[StudentRosterOut.model_validate(item, from_attributes=True) for item in students],
        marks=_marks_out(db, marks),
    )


@router.post("/attendance", response_model=BatchResult)
def mark_attendance(
    payload: AttendanceBatch,
    principal: Principal = Depends(faculty_only),
    db: Session = Depends(get_db),
) -> BatchResult:
    _authorize_batch(
        db,
        principal,
        {item.student_id for item in payload.records},
        {item.subject_id for item in payload.records},
    )
    # Plain insert: saving the same date again appends rows instead of replacing them.
    db.add_all(AttendanceRecord(**item.model_dump()) for item in payload.records)
    db.commit()
    logger.info("Faculty user %s saved %d attendance rows", principal.id, len(payload.records))
    return BatchResult(message="Attendance marked successfully", count=len(payload.records))


@router.get("/attendance/{subject_id}", response_model=list[AttendanceOut])
def subject_attendance(
    subject_id: str,
    principal: Principal = Depends(faculty_only),
    db: Session = Depends(get_db),
) -> list[AttendanceOut]:
    resolve_faculty(db, principal.id)
    records = list(
        db.execute(
            select(AttendanceRecord)
            .where(AttendanceRecord.subject_id == subject_id)
            .order_by(AttendanceRecord.date.desc())
        ).scalars()
    )
    students = student_briefs(db, (item.student_id for item in records))
    return [
        AttendanceOut(id=item.id, date=item.date, present=item.present, student=students.get(item.student_id))
        for item in records
    ]


@router.post("/marks", response_model=BatchResult)
def enter_marks(
    payload: MarksBatch,
    principal: Principal = Depends(faculty_only),
    db: Session = Depends(get_db),
) -> BatchResult:
    student_ids = {item.student_id for item in payload.records}
    subject_ids = {item.subject_id for item in payload.records}
    _authorize_batch(db, principal, student_ids, subject_ids)

    existing = {
        (item.student_id, item.subject_id): item
        for item in db.execute(
            select(MarksRecord).where(
                MarksRecord.student_id.in_(student_ids),
                MarksRecord.subject_id.in_(subject_ids),
            )
        ).scalars()
    }
    for entry in payload.records:
        key = (entry.student_id, entry.subject_id)
        record = existing.get(key)
        if record is None:
            record = MarksRecord(student_id=entry.student_id, subject_id=entry.subject_id)
            db.add(record)
            existing[key] = record
        record.internal1 = entry.internal1
        record.internal2 = entry.internal2
        record.external = entry.external
    db.commit()
    logger.info("Faculty user %s upserted %d marks rows", principal.id, len(payload.records))
    return BatchResult(message="Marks entered successfully", count=len(payload.records))


@router.get("/marks/{subject_id}", response_model=list[MarksOut])
def subject_marks(
    subject_id: str,
    principal: Principal = Depends(faculty_only),
    db: Session = Depends(get_db),
) -> list[MarksOut]:
    resolve_faculty(db, principal.id)
    records = list(db.execute(select(MarksRecord).where(MarksRecord.subject_id == subject_id)).scalars())
    return _marks_out(db, records)
