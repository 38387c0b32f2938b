"""
Chartmerge data models.

This package contains the SQLModel-based models that define the database schema
and data structures used throughout the package.
"""

from .base import BaseModel, VoidableMixin
from .cohort import Cohort
from .encounter import Encounter, EncounterBase
from .merge_log import PatientMergeLog
from .patient import Patient, PatientBase, PatientCreate
from .program import (
    Program,
    ProgramBase,
    ProgramEnrollment,
    ProgramEnrollmentBase,
)

__all__ = [
    "BaseModel",
    "Cohort",
    "Encounter",
    "EncounterBase",
    "Patient",
    "PatientBase",
    "PatientCreate",
    "PatientMergeLog",
    "Program",
    "ProgramBase",
    "ProgramEnrollment",
    "ProgramEnrollmentBase",
    "VoidableMixin",
]
