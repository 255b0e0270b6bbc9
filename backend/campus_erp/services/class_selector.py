"""Composite ``sectionId|subjectId`` keys used to select a faculty member's class.

Inside the API a selection is always the typed pair; the string form only
exists at the query-string boundary and in the class list handed to clients.
"""
from __future__ import annotations

from dataclasses import dataclass

from campus_erp.core.exceptions import ValidationFailed

SEPARATOR = "|"
PLACEHOLDER = "undefined"


@dataclass(frozen=True)
class ClassSelection:
    valid: bool
    section_id: str | None = None
    subject_id: str | None = None
    error: str | None = None

    def require(self) -> tuple[str, str]:
        if not self.valid:
            raise ValidationFailed(self.error or "Invalid class selection")
        return self.section_id, self.subject_id


def encode_class_key(section_id: str, subject_id: str) -> str:
    return f"{section_id}{SEPARATOR}{subject_id}"


def decode_class_key(token: str | None) -> ClassSelection:
    if not token:
        return ClassSelection(valid=False, error="No class selected")
    if SEPARATOR not in token:
        return ClassSelection(valid=False, error="Invalid class format")

    parts = token.split(SEPARATOR)
    section_id, subject_id = parts[0], parts[1]
    if not section_id or not subject_id or PLACEHOLDER in (section_id, subject_id):
        return ClassSelection(valid=False, error="Invalid section or subject ID")
    return ClassSelection(valid=True, section_id=section_id, subject_id=subject_id)
