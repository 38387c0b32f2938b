"""
Audit log of completed patient merges.
"""

from datetime import datetime
from typing import Any

from sqlmodel import JSON, Column, Field, SQLModel

from .base import utcnow


class PatientMergeLog(SQLModel, table=True):
    """One row per successful merge of a duplicate ("loser") into a preferred ("winner") patient."""

    __tablename__ = "patient_merge_log"

    id: int | None = Field(default=None, primary_key=True)
    winner_id: int = Field(foreign_key="patient.id", index=True)
    loser_id: int = Field(foreign_key="patient.id", index=True)
    creator: str | None = Field(default=None, max_length=64)
    date_created: datetime = Field(default_factory=utcnow)
    merged_data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
