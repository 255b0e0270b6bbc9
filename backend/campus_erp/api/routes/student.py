from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_erp.api.deps import Principal, get_db, require_roles
from campus_erp.core.config import get_settings
from campus_erp.core.exceptions import ResourceNotFoundError
from campus_erp.models.attendance import AttendanceRecord
from campus_erp.models.marks import MarksRecord
from campus_erp.models.student import Student
from campus_erp.models.timetable import TimetableSlot
from campus_erp.models.user import UserRole
from campus_erp.schemas.records import (
    AttendanceSummaryOut,
    StudentAttendanceOut,
    StudentMarksOut,
    SubjectAttendanceSummary,
)
from campus_erp.schemas.student import StudentOut
from campus_erp.schemas.timetable import TimetableSlotOut
from campus_erp.services.directory import slot_outs, student_outs, subject_briefs
from campus_erp.services.grades import derive_grade, summarize_attendance, total_marks

router = APIRouter()
student_only = require_roles(UserRole.student)


def _current_student(db: Session, principal: Principal) -> Student:
    student = db.execute(select(Student).where(Student.user_id == principal.id)).scalar_one_or_none()
    if student is None:
        raise ResourceNotFoundError("Student profile not found")
    return student


@router.get("/profile", response_model=StudentOut)
def profile(principal: Principal = Depends(student_only), db: Session = Depends(get_db)) -> StudentOut:
    return student_outs(db, [_current_student(db, principal)])[0]


@router.get("/attendance", response_model=list[StudentAttendanceOut])
def attendance(principal: Principal = Depends(student_only), db: Session = Depends(get_db)) -> list[StudentAttendanceOut]:
    student = _current_student(db, principal)
    records = list(
        db.execute(
            select(AttendanceRecord)
            .where(AttendanceRecord.student_id == student.id)
            .order_by(AttendanceRecord.date.desc())
        ).scalars()
    )
    subjects = subject_briefs(db, (item.subject_id for item in records))
    return [
        StudentAttendanceOut(
            id=item.id,
            date=item.date,
            present=item.present,
            subject_id=item.subject_id,
            subject=subjects.get(item.subject_id),
        )
        for item in records
    ]


@router.get("/attendance/summary", response_model=AttendanceSummaryOut)
def attendance_summary(principal: Principal = Depends(student_only), db: Session = Depends(get_db)) -> AttendanceSummaryOut:
    student = _current_student(db, principal)
    rows = db.execute(
        select(AttendanceRecord.subject_id, AttendanceRecord.present).where(AttendanceRecord.student_id == student.id)
    ).all()
    summary = summarize_attendance(rows, get_settings().attendance_low_threshold_percent)
    subjects = subject_briefs(db, (item["subject_id"] for item in summary["subjects"]))
    return AttendanceSummaryOut(
        overall_percentage=summary["overall_percentage"],
        total_present=summary["total_present"],
        total_classes=summary["total_classes"],
        subjects=[
            SubjectAttendanceSummary(**item, subject=subjects.get(item["subject_id"]))
            for item in summary["subjects"]
        ],
    )


@router.get("/marks", response_model=list[StudentMarksOut])
def marks(principal: Principal = Depends(student_only), db: Session = Depends(get_db)) -> list[StudentMarksOut]:
    student = _current_student(db, principal)
    records = list(db.execute(select(MarksRecord).where(MarksRecord.student_id == student.id)).scalars())
    subjects = subject_briefs(db, (item.subject_id for item in records))
    return [
        StudentMarksOut(
            id=item.id,
            subject_id=item.subject_id,
            internal1=item.internal1,
            internal2=item.internal2,
            external=item.external,
            total=total_marks(item),
            grade=derive_grade(total_marks(item)),
            subject=subjects.get(item.subject_id),
        )
        for item in records
    ]


@router.get("/timetable", response_model=list[TimetableSlotOut])
def timetable(principal: Principal = Depends(student_only), db: Session = Depends(get_db)) -> list[TimetableSlotOut]:
    student = _current_student(db, principal)
    if not student.section_id:
        raise ResourceNotFoundError("Student section not found")
    slots = db.execute(select(TimetableSlot).where(TimetableSlot.section_id == student.section_id)).scalars()
    return slot_outs(db, list(slots))
