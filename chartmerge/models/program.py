"""
Program and program enrollment models for the Chartmerge package.

An enrollment's program reference is nullable at the column level; the
non-null rule is checked when the enrollment is saved so that an invalid
enrollment surfaces as a validation error rather than a database error.
"""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship

from .base import BaseModel, VoidableMixin, utcnow

if TYPE_CHECKING:
    from .patient import Patient


class ProgramBase(BaseModel):
    """Base model for program data."""

    name: str = Field(min_length=1, max_length=100, unique=True)
    description: str | None = None
    retired: bool = False


class Program(ProgramBase, table=True):
    """A clinical program a patient can be enrolled in."""

    id: int | None = Field(default=None, primary_key=True)

    enrollments: list["ProgramEnrollment"] = Relationship(back_populates="program")


class ProgramEnrollmentBase(BaseModel):
    """Base model for program enrollment data."""

    patient_id: int | None = Field(default=None, foreign_key="patient.id", index=True)
    program_id: int | None = Field(default=None, foreign_key="program.id", index=True)
    date_enrolled: date | None = None
    date_completed: date | None = None
    creator: str | None = Field(default=None, max_length=64)


class ProgramEnrollment(ProgramEnrollmentBase, VoidableMixin, table=True):
    """Links a patient to a program with enrollment metadata."""

    __tablename__ = "program_enrollment"

    id: int | None = Field(default=None, primary_key=True)
    date_created: datetime = Field(default_factory=utcnow)

    patient: Optional["Patient"] = Relationship(back_populates="enrollments")
    program: Optional[Program] = Relationship(back_populates="enrollments")

