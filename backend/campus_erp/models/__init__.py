from campus_erp.models.activity_log import ActivityLog  # noqa: F401
from campus_erp.models.attendance import AttendanceRecord  # noqa: F401
from campus_erp.models.department import Department  # noqa: F401
from campus_erp.models.faculty import Faculty  # noqa: F401
from campus_erp.models.marks import MarksRecord  # noqa: F401
from campus_erp.models.section import Section  # noqa: F401
from campus_erp.models.student import Student  # noqa: F401
from campus_erp.models.subject import Subject  # noqa: F401
from campus_erp.models.timetable import DAY_ORDER, TimetableSlot, Weekday  # noqa: F401
from campus_erp.models.user import User, UserRole  # noqa: F401
