import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_erp.api.deps import Principal, get_db, get_identity_provider, require_roles
from campus_erp.core.exceptions import ResourceNotFoundError, ValidationFailed
from campus_erp.models.attendance import AttendanceRecord
from campus_erp.models.department import Department
from campus_erp.models.faculty import Faculty
from campus_erp.models.marks import MarksRecord
from campus_erp.models.section import Section
from campus_erp.models.student import Student
from campus_erp.models.subject import Subject
from campus_erp.models.timetable import TimetableSlot
from campus_erp.models.user import UserRole
from campus_erp.schemas.activity import ActivityLogOut
from campus_erp.schemas.common import DeleteResult, MutationResult
from campus_erp.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate
from campus_erp.schemas.faculty import FacultyCreate, FacultyListOut, FacultyOut, FacultyUpdate
from campus_erp.schemas.section import SectionCreate, SectionOut, SectionUpdate
from campus_erp.schemas.student import StudentCreate, StudentOut, StudentUpdate
from campus_erp.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate
from campus_erp.services import profiles
from campus_erp.services.access import require_identifier
from campus_erp.services.audit import MAX_ACTIVITY_PAGE, log_activity, recent_activity
from campus_erp.services.directory import department_briefs, faculty_outs, student_outs
from campus_erp.services.identity import IdentityProvider

router = APIRouter()
logger = logging.getLogger(__name__)
admin_only = require_roles(UserRole.admin)


def _get_or_404(db: Session, model, item_id: str, label: str):
    item = db.get(model, item_id)
    if item is None:
        raise ResourceNotFoundError(f"{label} not found")
    return item


def _require_department(db: Session, department_id: str | None) -> None:
    if department_id is None:
        return
    require_identifier(department_id, "Invalid department ID")
    if db.get(Department, department_id) is None:
        raise ValidationFailed("Department does not exist")


def _require_section(db: Session, section_id: str | None) -> None:
    if section_id is None:
        return
    require_identifier(section_id, "Invalid section ID")
    if db.get(Section, section_id) is None:
        raise ValidationFailed("Section does not exist")


def _commit(db: Session, duplicate_message: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationFailed(duplicate_message) from exc


def _section_out(db: Session, section: Section) -> SectionOut:
    departments = department_briefs(db, [section.department_id])
    return SectionOut(
        id=section.id,
        department_id=section.department_id,
        year=section.year,
        name=section.name,
        department=departments.get(section.department_id),
    )


def _subject_out(db: Session, subject: Subject) -> SubjectOut:
    departments = department_briefs(db, [subject.department_id])
    return SubjectOut(
        id=subject.id,
        department_id=subject.department_id,
        semester=subject.semester,
        name=subject.name,
        code=subject.code,
        department=departments.get(subject.department_id),
    )


def _purge_section(db: Session, section_id: str) -> None:
    db.execute(delete(TimetableSlot).where(TimetableSlot.section_id == section_id))
    db.execute(update(Student).where(Student.section_id == section_id).values(section_id=None))


def _purge_subject(db: Session, subject_id: str) -> None:
    db.execute(delete(TimetableSlot).where(TimetableSlot.subject_id == subject_id))
    db.execute(delete(AttendanceRecord).where(AttendanceRecord.subject_id == subject_id))
    db.execute(delete(MarksRecord).where(MarksRecord.subject_id == subject_id))


# Departments


@router.post("/departments", response_model=MutationResult[DepartmentOut], status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentCreate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> MutationResult[DepartmentOut]:
    existing = db.execute(select(Department).where(Department.code == payload.code)).scalar_one_or_none()
    if existing:
        raise ValidationFailed("Department code already exists")
    department = Department(**payload.model_dump())
    db.add(department)
    db.flush()
    log_activity(db, actor_id=principal.id, action="department.create", entity_type="department", entity_id=department.id)
    _commit(db, "Department code already exists")
    db.refresh(department)
    return MutationResult(data=[DepartmentOut.model_validate(department)])


@router.get("/departments", response_model=list[DepartmentOut])
def list_departments(principal: Principal = Depends(admin_only), db: Session = Depends(get_db)) -> list[DepartmentOut]:
    return list(db.execute(select(Department).order_by(Department.name.asc())).scalars())


@router.put("/departments/{department_id}", response_model=MutationResult[DepartmentOut])
def update_department(
    department_id: str,
    payload: DepartmentUpdate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> MutationResult[DepartmentOut]:
    department = _get_or_404(db, Department, department_id, "Department")
    clash = db.execute(
        select(Department).where(Department.code == payload.code, Department.id != department_id)
    ).scalar_one_or_none()
    if clash:
        raise ValidationFailed("Department code already exists")
    for key, value in payload.model_dump().items():
        setattr(department, key, value)
    log_activity(db, actor_id=principal.id, action="department.update", entity_type="department", entity_id=department_id)
    _commit(db, "Department code already exists")
    db.refresh(department)
    return MutationResult(data=[DepartmentOut.model_validate(department)])


@router.delete("/departments/{department_id}", response_model=DeleteResult)
def delete_department(
    department_id: str,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> DeleteResult:
    department = _get_or_404(db, Department, department_id, "Department")
    section_ids = list(db.execute(select(Section.id).where(Section.department_id == department_id)).scalars())
    subject_ids = list(db.execute(select(Subject.id).where(Subject.department_id == department_id)).scalars())
    for section_id in section_ids:
        _purge_section(db, section_id)
    for subject_id in subject_ids:
        _purge_subject(db, subject_id)
    db.execute(delete(Section).where(Section.department_id == department_id))
    db.execute(delete(Subject).where(Subject.department_id == department_id))
    db.execute(update(Faculty).where(Faculty.department_id == department_id).values(department_id=None))
    log_activity(
        db,
        actor_id=principal.id,
        action="department.delete",
        entity_type="department",
        entity_id=department_id,
        details={"sections": len(section_ids), "subjects": len(subject_ids)},
    )
    db.delete(department)
    db.commit()
    return DeleteResult()


# Sections


@router.post("/sections", response_model=MutationResult[SectionOut], status_code=status.HTTP_201_CREATED)
def create_section(
    payload: SectionCreate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> MutationResult[SectionOut]:
    _require_department(db, payload.department_id)
    section = Section(**payload.model_dump())
    db.add(section)
    db.flush()
    log_activity(db, actor_id=principal.id, action="section.create", entity_type="section", entity_id=section.id)
    db.commit()
    db.refresh(section)
    return MutationResult(data=[_section_out(db, section)])


@router.get("/sections", response_model=list[SectionOut])
def list_sections(principal: Principal = Depends(admin_only), db: Session = Depends(get_db)) -> list[SectionOut]:
    sections = list(db.execute(select(Section).order_by(Section.year.asc(), Section.name.asc())).scalars())
    departments = department_briefs(db, (item.department_id for item in sections))
    return [
        SectionOut(
            id=item.id,
            department_id=item.department_id,
            year=item.year,
            name=item.name,
            department=departments.get(item.department_id),
        )
        for item in sections
    ]


@router.put("/sections/{section_id}", response_model=MutationResult[SectionOut])
def update_section(
    section_id: str,
    payload: SectionUpdate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> MutationResult[SectionOut]:
    section = _get_or_404(db, Section, section_id, "Section")
    _require_department(db, payload.department_id)
    for key, value in payload.model_dump().items():
        setattr(section, key, value)
    log_activity(db, actor_id=principal.id, action="section.update", entity_type="section", entity_id=section_id)
    db.commit()
    db.refresh(section)
    return MutationResult(data=[_section_out(db, section)])


@router.delete("/sections/{section_id}", response_model=DeleteResult)
def delete_section(
    section_id: str,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> DeleteResult:
    section = _get_or_404(db, Section, section_id, "Section")
    _purge_section(db, section_id)
    log_activity(db, actor_id=principal.id, action="section.delete", entity_type="section", entity_id=section_id)
    db.delete(section)
    db.commit()
    return DeleteResult()


# Subjects


@router.post("/subjects", response_model=MutationResult[SubjectOut], status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> MutationResult[SubjectOut]:
    _require_department(db, payload.department_id)
    subject = Subject(**payload.model_dump())
    db.add(subject)
    db.flush()
    log_activity(db, actor_id=principal.id, action="subject.create", entity_type="subject", entity_id=subject.id)
    db.commit()
    db.refresh(subject)
    return MutationResult(data=[_subject_out(db, subject)])


@router.get("/subjects", response_model=list[SubjectOut])
def list_subjects(principal: Principal = Depends(admin_only), db: Session = Depends(get_db)) -> list[SubjectOut]:
    subjects = list(db.execute(select(Subject).order_by(Subject.semester.asc(), Subject.code.asc())).scalars())
    departments = department_briefs(db, (item.department_id for item in subjects))
    return [
        SubjectOut(
            id=item.id,
            department_id=item.department_id,
            semester=item.semester,
            name=item.name,
            code=item.code,
            department=departments.get(item.department_id),
        )
        for item in subjects
    ]


@router.put("/subjects/{subject_id}", response_model=MutationResult[SubjectOut])
def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> MutationResult[SubjectOut]:
    subject = _get_or_404(db, Subject, subject_id, "Subject")
    _require_department(db, payload.department_id)
    for key, value in payload.model_dump().items():
        setattr(subject, key, value)
    log_activity(db, actor_id=principal.id, action="subject.update", entity_type="subject", entity_id=subject_id)
    db.commit()
    db.refresh(subject)
    return MutationResult(data=[_subject_out(db, subject)])


@router.delete("/subjects/{subject_id}", response_model=DeleteResult)
def delete_subject(
    subject_id: str,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> DeleteResult:
    subject = _get_or_404(db, Subject, subject_id, "Subject")
    _purge_subject(db, subject_id)
    log_activity(db, actor_id=principal.id, action="subject.delete", entity_type="subject", entity_id=subject_id)
    db.delete(subject)
    db.commit()
    return DeleteResult()


# Students


@router.post("/students", response_model=MutationResult[StudentOut], status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    identities: IdentityProvider = Depends(get_identity_provider),
) -> MutationResult[StudentOut]:
    _require_section(db, payload.section_id)
    student = profiles.create_student(
        db,
        identities,
        email=payload.email,
        password=payload.password,
        roll_no=payload.roll_no,
        name=payload.name,
        section_id=payload.section_id,
        admission_year=payload.admission_year,
    )
    log_activity(db, actor_id=principal.id, action="student.create", entity_type="student", entity_id=student.id)
    db.commit()
    return MutationResult(data=student_outs(db, [student]))


@router.get("/students", response_model=list[StudentOut])
def list_students(
    section_id: str | None = Query(default=None),
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    statement = select(Student).order_by(Student.roll_no.asc())
    if section_id:
        statement = statement.where(Student.section_id == section_id)
    return student_outs(db, list(db.execute(statement).scalars()))


@router.put("/students/{student_id}", response_model=MutationResult[StudentOut])
def update_student(
    student_id: str,
    payload: StudentUpdate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> MutationResult[StudentOut]:
    student = _get_or_404(db, Student, student_id, "Student")
    _require_section(db, payload.section_id)
    for key, value in payload.model_dump().items():
        setattr(student, key, value)
    log_activity(db, actor_id=principal.id, action="student.update", entity_type="student", entity_id=student_id)
    _commit(db, "Student roll number already exists")
    db.refresh(student)
    return MutationResult(data=student_outs(db, [student]))


@router.delete("/students/{student_id}")
def delete_student(
    student_id: str,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    identities: IdentityProvider = Depends(get_identity_provider),
) -> dict:
    student = _get_or_404(db, Student, student_id, "Student")
    identity_deleted = profiles.delete_student(db, identities, student)
    log_activity(
        db,
        actor_id=principal.id,
        action="student.delete",
        entity_type="student",
        entity_id=student_id,
        details={"identity_deleted": identity_deleted},
    )
    db.commit()
    return {"success": True, "identity_deleted": identity_deleted}


# Faculty


@router.post("/faculty", response_model=MutationResult[FacultyOut], status_code=status.HTTP_201_CREATED)
def create_faculty(
    payload: FacultyCreate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    identities: IdentityProvider = Depends(get_identity_provider),
) -> MutationResult[FacultyOut]:
    _require_department(db, payload.department_id)
    member = profiles.create_faculty(
        db,
        identities,
        email=payload.email,
        password=payload.password,
        employee_id=payload.employee_id,
        name=payload.name,
        department_id=payload.department_id,
    )
    log_activity(db, actor_id=principal.id, action="faculty.create", entity_type="faculty", entity_id=member.id)
    db.commit()
    return MutationResult(data=faculty_outs(db, [member]))


@router.get("/faculty", response_model=list[FacultyListOut])
def list_faculty(principal: Principal = Depends(admin_only), db: Session = Depends(get_db)) -> list[FacultyListOut]:
    members = list(db.execute(select(Faculty).order_by(Faculty.employee_id.asc())).scalars())
    counts = dict(
        db.execute(
            select(TimetableSlot.faculty_id, func.count(TimetableSlot.id)).group_by(TimetableSlot.faculty_id)
        ).all()
    )
    return [
        FacultyListOut(
            **item.model_dump(),
            timetable_count=counts.get(item.id, 0),
            hasAssignments=counts.get(item.id, 0) > 0,
        )
        for item in faculty_outs(db, members)
    ]


@router.put("/faculty/{faculty_id}", response_model=MutationResult[FacultyOut])
def update_faculty(
    faculty_id: str,
    payload: FacultyUpdate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> MutationResult[FacultyOut]:
    member = _get_or_404(db, Faculty, faculty_id, "Faculty")
    _require_department(db, payload.department_id)
    for key, value in payload.model_dump().items():
        setattr(member, key, value)
    log_activity(db, actor_id=principal.id, action="faculty.update", entity_type="faculty", entity_id=faculty_id)
    _commit(db, "Faculty employee ID already exists")
    db.refresh(member)
    return MutationResult(data=faculty_outs(db, [member]))


@router.delete("/faculty/{faculty_id}")
def delete_faculty(
    faculty_id: str,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    identities: IdentityProvider = Depends(get_identity_provider),
) -> dict:
    member = _get_or_404(db, Faculty, faculty_id, "Faculty")
    identity_deleted = profiles.delete_faculty(db, identities, member)
    log_activity(
        db,
        actor_id=principal.id,
        action="faculty.delete",
        entity_type="faculty",
        entity_id=faculty_id,
        details={"identity_deleted": identity_deleted},
    )
    db.commit()
    return {"success": True, "identity_deleted": identity_deleted}


# Activity


@router.get("/activity", response_model=list[ActivityLogOut])
def list_activity(
    entity_type: str | None = Query(default=None),
    entity_id: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=MAX_ACTIVITY_PAGE),
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
) -> list[ActivityLogOut]:
    return recent_activity(db, entity_type=entity_type, entity_id=entity_id, limit=limit)
