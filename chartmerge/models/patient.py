"""
Patient models for the Chartmerge package.
"""

from datetime import date
from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship

from .base import BaseModel, VoidableMixin

if TYPE_CHECKING:
    from .encounter import Encounter
    from .program import ProgramEnrollment


class PatientBase(BaseModel):
    """Base model for patient data."""

    given_name: str = Field(min_length=1, max_length=64)
    family_name: str | None = Field(default=None, max_length=64)
    gender: str | None = Field(default=None, max_length=1)
    birthdate: date | None = None


class Patient(PatientBase, VoidableMixin, table=True):
    """Model representing a patient in the system."""

    id: int | None = Field(default=None, primary_key=True)

    encounters: list["Encounter"] = Relationship(back_populates="patient")
    enrollments: list["ProgramEnrollment"] = Relationship(back_populates="patient")

    @property
    def display_name(self) -> str:
        """Full name for log messages."""
        return " ".join(part for part in (self.given_name, self.family_name) if part)


class PatientCreate(PatientBase):
    """Pydantic model for creating a new patient."""

    pass
