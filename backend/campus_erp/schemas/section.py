from pydantic import BaseModel, Field, field_validator

from campus_erp.schemas.common import strip_required
from campus_erp.schemas.department import DepartmentBrief


class SectionBase(BaseModel):
    department_id: str = Field(min_length=1, max_length=36)
    year: int = Field(ge=1, le=4)
    name: str = Field(min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return strip_required(value)


class SectionCreate(SectionBase):
    pass


class SectionUpdate(SectionBase):
    pass


class SectionBrief(BaseModel):
    id: str
    name: str
    year: int
    department: DepartmentBrief | None = None


class SectionOut(SectionBrief):
    department_id: str
