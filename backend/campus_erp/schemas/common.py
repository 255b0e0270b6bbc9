from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class MutationResult(BaseModel, Generic[T]):
    success: bool = True
    data: list[T]


class DeleteResult(BaseModel):
    success: bool = True


def strip_required(value: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Value cannot be empty")
    return trimmed
