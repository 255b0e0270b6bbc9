"""Batch lookups that turn foreign-key columns into nested brief objects."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_erp.models.department import Department
from campus_erp.models.faculty import Faculty
from campus_erp.models.section import Section
from campus_erp.models.student import Student
from campus_erp.models.subject import Subject
from campus_erp.models.timetable import DAY_ORDER, TimetableSlot
from campus_erp.schemas.department import DepartmentBrief
from campus_erp.schemas.faculty import FacultyBrief, FacultyOut
from campus_erp.schemas.section import SectionBrief
from campus_erp.schemas.student import StudentBrief, StudentOut
from campus_erp.schemas.subject import SubjectBrief
from campus_erp.schemas.timetable import TimetableSlotOut


def _ids(values: Iterable[str | None]) -> set[str]:
    return {value for value in values if value}


def department_briefs(db: Session, ids: Iterable[str | None]) -> dict[str, DepartmentBrief]:
    wanted = _ids(ids)
    if not wanted:
        return {}
    rows = db.execute(select(Department).where(Department.id.in_(wanted))).scalars()
    return {row.id: DepartmentBrief.model_validate(row) for row in rows}


def section_briefs(db: Session, ids: Iterable[str | None]) -> dict[str, SectionBrief]:
    wanted = _ids(ids)
    if not wanted:
        return {}
    sections = list(db.execute(select(Section).where(Section.id.in_(wanted))).scalars())
    departments = department_briefs(db, (item.department_id for item in sections))
    return {
        item.id: SectionBrief(
            id=item.id,
            name=item.name,
            year=item.year,
            department=departments.get(item.department_id),
        )
        for item in sections
    }


def subject_briefs(db: Session, ids: Iterable[str | None]) -> dict[str, SubjectBrief]:
    wanted = _ids(ids)
    if not wanted:
        return {}
    rows = db.execute(select(Subject).where(Subject.id.in_(wanted))).scalars()
    return {row.id: SubjectBrief.model_validate(row) for row in rows}


def faculty_briefs(db: Session, ids: Iterable[str | None]) -> dict[str, FacultyBrief]:
    wanted = _ids(ids)
    if not wanted:
        return {}
    rows = db.execute(select(Faculty).where(Faculty.id.in_(wanted))).scalars()
    return {row.id: FacultyBrief.model_validate(row) for row in rows}


def student_briefs(db: Session, ids: Iterable[str | None]) -> dict[str, StudentBrief]:
    wanted = _ids(ids)
    if not wanted:
        return {}
    rows = db.execute(select(Student).where(Student.id.in_(wanted))).scalars()
    return {row.id: StudentBrief.model_validate(row) for row in rows}


def student_outs(db: Session, students: list[Student]) -> list[StudentOut]:
    sections = section_briefs(db, (item.section_id for item in students))
    return [
        StudentOut(
            id=item.id,
            user_id=item.user_id,
            roll_no=item.roll_no,
            name=item.name,
            section_id=item.section_id,
            admission_year=item.admission_year,
            section=sections.get(item.section_id) if item.section_id else None,
        )
        for item in students
    ]


def faculty_outs(db: Session, members: list[Faculty]) -> list[FacultyOut]:
    departments = department_briefs(db, (item.department_id for item in members))
    return [
        FacultyOut(
            id=item.id,
            user_id=item.user_id,
            employee_id=item.employee_id,
            name=item.name,
            department_id=item.department_id,
            department=departments.get(item.department_id) if item.department_id else None,
        )
        for item in members
    ]


def sort_slots(slots: Iterable[TimetableSlot]) -> list[TimetableSlot]:
    return sorted(slots, key=lambda slot: (DAY_ORDER.get(slot.day.value, len(DAY_ORDER)), slot.period))


def slot_outs(db: Session, slots: list[TimetableSlot]) -> list[TimetableSlotOut]:
    sections = section_briefs(db, (slot.section_id for slot in slots))
    subjects = subject_briefs(db, (slot.subject_id for slot in slots))
    faculty = faculty_briefs(db, (slot.faculty_id for slot in slots))
    return [
        TimetableSlotOut(
            id=slot.id,
            section_id=slot.section_id,
            subject_id=slot.subject_id,
            faculty_id=slot.faculty_id,
            day=slot.day,
            period=slot.period,
            section=sections.get(slot.section_id),
            subject=subjects.get(slot.subject_id),
            faculty=faculty.get(slot.faculty_id),
        )
        for slot in sort_slots(slots)
    ]
