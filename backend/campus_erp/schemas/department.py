from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from campus_erp.schemas.common import strip_required


class DepartmentBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=20)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return strip_required(value)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return strip_required(value).upper()


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentUpdate(DepartmentBase):
    pass


class DepartmentBrief(BaseModel):
    id: str
    name: str
    code: str

    model_config = {"from_attributes": True}


class DepartmentOut(DepartmentBrief):
    created_at: datetime | None = None


class DepartmentStatsOut(DepartmentBrief):
    studentsCount: int
    facultyCount: int
