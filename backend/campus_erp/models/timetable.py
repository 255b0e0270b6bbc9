import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from campus_erp.db.base import Base


class Weekday(str, Enum):
    Monday = "Monday"
    Tuesday = "Tuesday"
    Wednesday = "Wednesday"
    Thursday = "Thursday"
    Friday = "Friday"
    Saturday = "Saturday"


DAY_ORDER = {day.value: index for index, day in enumerate(Weekday)}


class TimetableSlot(Base):
    # (section_id, day, period) is not unique; services.slots checks conflicts.
    __tablename__ = "timetable"
    __table_args__ = (Index("ix_timetable_section_day_period", "section_id", "day", "period"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    section_id: Mapped[str] = mapped_column(String(36), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    faculty_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    day: Mapped[Weekday] = mapped_column(SAEnum(Weekday, name="weekday"), nullable=False)
    period: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
