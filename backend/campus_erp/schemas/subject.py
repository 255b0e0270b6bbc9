from pydantic import BaseModel, Field, field_validator

from campus_erp.schemas.common import strip_required
from campus_erp.schemas.department import DepartmentBrief


class SubjectBase(BaseModel):
    department_id: str = Field(min_length=1, max_length=36)
    semester: int = Field(ge=1, le=8)
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return strip_required(value)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return strip_required(value).upper()


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(SubjectBase):
    pass


class SubjectBrief(BaseModel):
    id: str
    name: str
    code: str

    model_config = {"from_attributes": True}


class SubjectOut(SubjectBrief):
    department_id: str
    semester: int
    department: DepartmentBrief | None = None
