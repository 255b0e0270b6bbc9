from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from campus_erp.api.deps import Principal, get_db, require_roles
from campus_erp.models.department import Department
from campus_erp.models.faculty import Faculty
from campus_erp.models.section import Section
from campus_erp.models.student import Student
from campus_erp.models.subject import Subject
from campus_erp.models.user import UserRole
from campus_erp.schemas.department import DepartmentStatsOut
from campus_erp.schemas.stats import AdminStatsOut

router = APIRouter()
admin_only = require_roles(UserRole.admin)


def _count(db: Session, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


@router.get("/admin", response_model=AdminStatsOut)
def admin_stats(principal: Principal = Depends(admin_only), db: Session = Depends(get_db)) -> AdminStatsOut:
    return AdminStatsOut(
        totalStudents=_count(db, Student),
        totalFaculty=_count(db, Faculty),
        totalDepartments=_count(db, Department),
        totalSubjects=_count(db, Subject),
    )


@router.get("/departments", response_model=list[DepartmentStatsOut])
def department_stats(principal: Principal = Depends(admin_only), db: Session = Depends(get_db)) -> list[DepartmentStatsOut]:
    departments = list(db.execute(select(Department).order_by(Department.name.asc())).scalars())
    student_counts = dict(
        db.execute(
            select(Section.department_id, func.count(Student.id))
            .join(Student, Student.section_id == Section.id)
            .group_by(Section.department_id)
        ).all()
    )
    faculty_counts = dict(
        db.execute(
            select(Faculty.department_id, func.count(Faculty.id))
            .where(Faculty.department_id.is_not(None))
            .group_by(Faculty.department_id)
        ).all()
    )
    return [
        DepartmentStatsOut(
            id=item.id,
            name=item.name,
            code=item.code,
            studentsCount=student_counts.get(item.id, 0),
            facultyCount=faculty_counts.get(item.id, 0),
        )
        for item in departments
    ]
