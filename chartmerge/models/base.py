"""
Base models for the Chartmerge package.

This module provides the base SQLModel classes and common functionality
used throughout the Chartmerge models.
"""

from datetime import UTC, datetime
from typing import Any, TypeAlias

from pydantic import field_validator
from sqlmodel import Field, SQLModel

T: TypeAlias = Any


def utcnow() -> datetime:
    """Timezone-aware current time used for audit columns."""
    return datetime.now(UTC)


class BaseModel(SQLModel):
    """Base model for all Chartmerge models with common validation and utilities."""

    @field_validator("*", mode="before")
    @classmethod
    def empty_to_none(cls, value: T) -> T | None:
        """Convert empty strings to None."""
        if isinstance(value, str):
            value = value.replace("\x00", " ")
            if value == "" or value == "null":
                return None
        return value


class VoidableMixin(SQLModel):
    """Soft-delete columns shared by clinical records."""

    voided: bool = Field(default=False, index=True)
    void_reason: str | None = Field(default=None, max_length=255)
    date_voided: datetime | None = None
