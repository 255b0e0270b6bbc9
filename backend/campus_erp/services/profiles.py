"""Two-step identity + profile operations for students and faculty."""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_erp.core.exceptions import IdentityProviderError, ValidationFailed
from campus_erp.models.attendance import AttendanceRecord
from campus_erp.models.faculty import Faculty
from campus_erp.models.marks import MarksRecord
from campus_erp.models.student import Student
from campus_erp.models.timetable import TimetableSlot
from campus_erp.models.user import UserRole
from campus_erp.services.identity import IdentityProvider

logger = logging.getLogger(__name__)


@dataclass
class SagaStep:
    name: str
    action: Callable[[dict], Any]
    undo: Callable[[dict], None] | None = None


@dataclass
class Saga:
    """Run steps in order; on failure undo the completed ones in reverse and re-raise."""

    name: str
    steps: list[SagaStep] = field(default_factory=list)

    def step(self, name: str, action: Callable[[dict], Any], undo: Callable[[dict], None] | None = None) -> "Saga":
        self.steps.append(SagaStep(name=name, action=action, undo=undo))
        return self

    def run(self) -> dict:
        context: dict = {}
        completed: list[SagaStep] = []
        for step in self.steps:
            try:
                context[step.name] = step.action(context)
            except Exception:
                logger.warning("Saga %s failed at step %s; compensating", self.name, step.name)
                for done in reversed(completed):
                    if done.undo is None:
                        logger.warning("Saga %s: step %s has no undo", self.name, done.name)
                        continue
                    try:
                        done.undo(context)
                    except Exception:
                        logger.exception("Saga %s: undo of step %s failed", self.name, done.name)
                raise
            completed.append(step)
            logger.info("Saga %s: step %s done", self.name, step.name)
        return context


def _insert_profile(db: Session, profile: Student | Faculty, duplicate_message: str) -> Student | Faculty:
    db.add(profile)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationFailed(duplicate_message) from exc
    db.refresh(profile)
    return profile


def create_student(
    db: Session,
    identities: IdentityProvider,
    *,
    email: str,
    password: str,
    roll_no: str,
    name: str,
    section_id: str | None,
    admission_year: int,
) -> Student:
    saga = (
        Saga("create_student")
        .step(
            "identity",
            lambda ctx: identities.create_identity(email=email, password=password, role=UserRole.student),
            undo=lambda ctx: identities.delete_identity(ctx["identity"].id),
        )
        .step(
            "profile",
            lambda ctx: _insert_profile(
                db,
                Student(
                    user_id=ctx["identity"].id,
                    roll_no=roll_no,
                    name=name,
                    section_id=section_id,
                    admission_year=admission_year,
                ),
                "Student roll number already exists",
            ),
        )
    )
    return saga.run()["profile"]


def create_faculty(
    db: Session,
    identities: IdentityProvider,
    *,
    email: str,
    password: str,
    employee_id: str,
    name: str,
    department_id: str | None,
) -> Faculty:
    saga = (
        Saga("create_faculty")
        .step(
            "identity",
            lambda ctx: identities.create_identity(email=email, password=password, role=UserRole.faculty),
            undo=lambda ctx: identities.delete_identity(ctx["identity"].id),
        )
        .step(
            "profile",
            lambda ctx: _insert_profile(
                db,
                Faculty(
                    user_id=ctx["identity"].id,
                    employee_id=employee_id,
                    name=name,
                    department_id=department_id,
                ),
                "Faculty employee ID already exists",
            ),
        )
    )
    return saga.run()["profile"]


def _remove_student_rows(db: Session, student: Student) -> str:
    user_id = student.user_id
    db.execute(delete(AttendanceRecord).where(AttendanceRecord.student_id == student.id))
    db.execute(delete(MarksRecord).where(MarksRecord.student_id == student.id))
    db.delete(student)
    db.commit()
    return user_id


def _remove_faculty_rows(db: Session, faculty: Faculty) -> str:
    user_id = faculty.user_id
    db.execute(delete(TimetableSlot).where(TimetableSlot.faculty_id == faculty.id))
    db.delete(faculty)
    db.commit()
    return user_id


def _delete_with_identity(
    name: str,
    identities: IdentityProvider,
    remove_profile: Callable[[], str],
) -> bool:
    """Delete the profile, then its identity. Returns whether the identity was removed.

    The profile step is committed first and has no undo, so a failing identity
    removal leaves the profile deleted and the identity orphaned.
    """
    saga = (
        Saga(name)
        .step("profile", lambda ctx: remove_profile())
        .step("identity", lambda ctx: identities.delete_identity(ctx["profile"]) if ctx["profile"] else None)
    )
    try:
        saga.run()
    except IdentityProviderError as exc:
        logger.error("%s left an orphaned identity: %s", name, exc.message)
        return False
    return True


def delete_student(db: Session, identities: IdentityProvider, student: Student) -> bool:
    return _delete_with_identity("delete_student", identities, lambda: _remove_student_rows(db, student))


def delete_faculty(db: Session, identities: IdentityProvider, faculty: Faculty) -> bool:
    return _delete_with_identity("delete_faculty", identities, lambda: _remove_faculty_rows(db, faculty))
