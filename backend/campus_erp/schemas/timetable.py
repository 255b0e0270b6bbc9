from pydantic import BaseModel, Field

from campus_erp.models.timetable import Weekday
from campus_erp.schemas.faculty import FacultyBrief
from campus_erp.schemas.section import SectionBrief
from campus_erp.schemas.subject import SubjectBrief

PERIOD_MIN = 1
PERIOD_MAX = 8


class TimetableSlotCreate(BaseModel):
    section_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    faculty_id: str = Field(min_length=1, max_length=36)
    day: Weekday
    period: int = Field(ge=PERIOD_MIN, le=PERIOD_MAX)


class TimetableSlotUpdate(BaseModel):
    section_id: str | None = Field(default=None, min_length=1, max_length=36)
    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    faculty_id: str | None = Field(default=None, min_length=1, max_length=36)
    day: Weekday | None = None
    period: int | None = Field(default=None, ge=PERIOD_MIN, le=PERIOD_MAX)


class TimetableSlotOut(BaseModel):
    id: str
    section_id: str
    subject_id: str
    faculty_id: str
    day: Weekday
    period: int
    section: SectionBrief | None = None
    subject: SubjectBrief | None = None
    faculty: FacultyBrief | None = None


class FacultyClassOut(BaseModel):
    id: str
    day: Weekday
    period: int
    section_id: str
    subject_id: str
    class_key: str
    section: SectionBrief | None = None
    subject: SubjectBrief | None = None
