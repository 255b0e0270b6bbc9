from pydantic import BaseModel


class AdminStatsOut(BaseModel):
    totalStudents: int
    totalFaculty: int
    totalDepartments: int
    totalSubjects: int
