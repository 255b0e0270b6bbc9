from datetime import date

from pydantic import BaseModel, Field, field_validator

from campus_erp.schemas.student import StudentBrief, StudentRosterOut
from campus_erp.schemas.subject import SubjectBrief


class AttendanceEntry(BaseModel):
    student_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    date: date
    present: bool


class AttendanceBatch(BaseModel):
    records: list[AttendanceEntry] = Field(default_factory=list, max_length=2000, validate_default=True)

    @field_validator("records", mode="before")
    @classmethod
    def require_records(cls, value: object) -> object:
        if not value:
            raise ValueError("Attendance records required")
        return value


class MarksEntry(BaseModel):
    student_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    internal1: int | None = Field(default=None, ge=0, le=20)
    internal2: int | None = Field(default=None, ge=0, le=20)
    external: int | None = Field(default=None, ge=0, le=100)


class MarksBatch(BaseModel):
    records: list[MarksEntry] = Field(default_factory=list, max_length=2000, validate_default=True)

    @field_validator("records", mode="before")
    @classmethod
    def require_records(cls, value: object) -> object:
        if not value:
            raise ValueError("Mark records required")
        return value


class BatchResult(BaseModel):
    success: bool = True
    message: str
    count: int


class AttendanceOut(BaseModel):
    id: str
    date: date
    present: bool
    student: StudentBrief | None = None


class StudentAttendanceOut(BaseModel):
    id: str
    date: date
    present: bool
    subject_id: str
    subject: SubjectBrief | None = None


class SubjectAttendanceSummary(BaseModel):
    subject_id: str
    subject: SubjectBrief | None = None
    present: int
    total: int
    percentage: float
    status: str


class AttendanceSummaryOut(BaseModel):
    overall_percentage: float
    total_present: int
    total_classes: int
    subjects: list[SubjectAttendanceSummary]


class MarksOut(BaseModel):
    id: str
    internal1: int | None = None
    internal2: int | None = None
    external: int | None = None
    total: int
    grade: str
    student: StudentBrief | None = None


class StudentMarksOut(BaseModel):
    id: str
    subject_id: str
    internal1: int | None = None
    internal2: int | None = None
    external: int | None = None
    total: int
    grade: str
    subject: SubjectBrief | None = None


class ClassSheetOut(BaseModel):
    section_id: str
    subject_id: str
    class_key: str
    students: list[StudentRosterOut]
    marks: list[MarksOut]
