"""Repository layer for data access operations."""

from .base import BaseRepository
from .encounter_repository import EncounterRepository
from .merge_log_repository import PatientMergeLogRepository
from .patient_repository import PatientRepository
from .program_repository import ProgramEnrollmentRepository, ProgramRepository

__all__ = [
    "BaseRepository",
    "EncounterRepository",
    "PatientMergeLogRepository",
    "PatientRepository",
    "ProgramEnrollmentRepository",
    "ProgramRepository",
]
