from pydantic import BaseModel, EmailStr, Field, field_validator

from campus_erp.models.user import UserRole
from campus_erp.schemas.faculty import FacultyOut
from campus_erp.schemas.student import StudentOut


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserOut(BaseModel):
    id: str
    email: EmailStr
    role: UserRole

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserOut


class ProfileOut(UserOut):
    student: StudentOut | None = None
    faculty: FacultyOut | None = None
