from pydantic import BaseModel, EmailStr, Field, field_validator

from campus_erp.schemas.common import strip_required
from campus_erp.schemas.department import DepartmentBrief


class FacultyBase(BaseModel):
    employee_id: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    department_id: str | None = None

    @field_validator("employee_id", "name")
    @classmethod
    def normalize_text(cls, value: str) -> str:
        return strip_required(value)

    @field_validator("department_id")
    @classmethod
    def blank_department_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class FacultyCreate(FacultyBase):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class FacultyUpdate(FacultyBase):
    pass


class FacultyBrief(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}


class FacultyOut(FacultyBrief):
    user_id: str
    employee_id: str
    department_id: str | None = None
    department: DepartmentBrief | None = None


class FacultyListOut(FacultyOut):
    timetable_count: int = 0
    hasAssignments: bool = False
