from sqlalchemy import func, select

from campus_erp.db.session import SessionLocal
from campus_erp.models.department import Department
from campus_erp.models.faculty import Faculty
from campus_erp.models.student import Student
from campus_erp.models.subject import Subject
from campus_erp.models.timetable import TimetableSlot
from campus_erp.models.user import User, UserRole

db = SessionLocal()
try:
    print(f"Users: {db.query(User).count()}")
    for role in UserRole:
        print(f"  - {role.value.title()}: {db.query(User).filter(User.role == role).count()}")

    print(f"Departments: {db.query(Department).count()}")
    print(f"Subjects: {db.query(Subject).count()}")
    print(f"Students: {db.query(Student).count()} ({db.query(Student).filter(Student.section_id.is_(None)).count()} without section)")
    print(f"Faculty: {db.query(Faculty).count()}")

    # Concurrent creates can slip past the API conflict check.
    duplicates = (
        db.query(TimetableSlot.section_id, TimetableSlot.day, TimetableSlot.period, func.count(TimetableSlot.id))
        .group_by(TimetableSlot.section_id, TimetableSlot.day, TimetableSlot.period)
        .having(func.count(TimetableSlot.id) > 1)
        .all()
    )
    print(f"Double-booked timetable slots: {len(duplicates)}")
    for section_id, day, period, count in duplicates:
        print(f"  - section {section_id} {day.value} P{period}: {count} entries")

    # Left behind when a profile delete succeeds but the identity delete does not.
    orphaned = (
        db.query(User)
        .filter(User.role == UserRole.student, ~User.id.in_(select(Student.user_id)))
        .union(db.query(User).filter(User.role == UserRole.faculty, ~User.id.in_(select(Faculty.user_id))))
        .all()
    )
    print(f"Identities without a profile: {len(orphaned)}")
    for user in orphaned:
        print(f"  - {user.email} ({user.role.value})")
finally:
    db.close()
