from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from campus_erp.schemas.common import strip_required
from campus_erp.schemas.section import SectionBrief

CURRENT_YEAR_CEILING = datetime.now().year + 1


class StudentBase(BaseModel):
    roll_no: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    section_id: str | None = None
    admission_year: int = Field(ge=1950, le=CURRENT_YEAR_CEILING)

    @field_validator("roll_no", "name")
    @classmethod
    def normalize_text(cls, value: str) -> str:
        return strip_required(value)

    @field_validator("section_id")
    @classmethod
    def blank_section_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class StudentCreate(StudentBase):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class StudentUpdate(StudentBase):
    pass


class StudentBrief(BaseModel):
    id: str
    roll_no: str
    name: str

    model_config = {"from_attributes": True}


class StudentOut(StudentBrief):
    user_id: str
    section_id: str | None = None
    admission_year: int
    section: SectionBrief | None = None


class StudentRosterOut(StudentBrief):
    section_id: str | None = None
    admission_year: int
