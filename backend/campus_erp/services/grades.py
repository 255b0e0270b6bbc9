from __future__ import annotations

from collections.abc import Iterable
from typing import Any

MAX_TOTAL = 140
GRADE_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C"),
    (40, "D"),
)


def total_marks(record: Any) -> int:
    return sum(getattr(record, field, None) or 0 for field in ("internal1", "internal2", "external"))


def derive_grade(total: float, maximum: float = MAX_TOTAL) -> str:
    percent = total * 100 / maximum if maximum else 0
    for threshold, grade in GRADE_THRESHOLDS:
        if percent >= threshold:
            return grade
    return "F"


def summarize_attendance(rows: Iterable[tuple[str, bool]], low_threshold: float) -> dict:
    """Fold ``(subject_id, present)`` pairs into per-subject and overall percentages."""
    per_subject: dict[str, dict] = {}
    for subject_id, present in rows:
        bucket = per_subject.setdefault(subject_id, {"subject_id": subject_id, "present": 0, "total": 0})
        bucket["total"] += 1
        if present:
            bucket["present"] += 1

    for bucket in per_subject.values():
        percentage = round(bucket["present"] / bucket["total"] * 100, 1)
        bucket["percentage"] = percentage
        bucket["status"] = "Good" if percentage >= low_threshold else "Low"

    total_present = sum(item["present"] for item in per_subject.values())
    total_classes = sum(item["total"] for item in per_subject.values())
    overall = round(total_present / total_classes * 100, 1) if total_classes else 0.0
    return {
        "overall_percentage": overall,
        "total_present": total_present,
        "total_classes": total_classes,
        "subjects": list(per_subject.values()),
    }
