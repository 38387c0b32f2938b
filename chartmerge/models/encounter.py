"""
Encounter models for the Chartmerge package.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship

from .base import BaseModel, VoidableMixin, utcnow

if TYPE_CHECKING:
    from .patient import Patient


class EncounterBase(BaseModel):
    """Base model for encounter data."""

    patient_id: int = Field(foreign_key="patient.id", index=True)
    encounter_type: str = Field(min_length=1, max_length=50)
    encounter_datetime: datetime = Field(default_factory=utcnow)


class Encounter(EncounterBase, VoidableMixin, table=True):
    """A clinical encounter; belongs to exactly one patient."""

    id: int | None = Field(default=None, primary_key=True)

    patient: Optional["Patient"] = Relationship(back_populates="encounters")
