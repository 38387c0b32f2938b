"""Exceptions for the Chartmerge package."""

from .domain import (
    BusinessRuleViolationError,
    ChartmergeError,
    DatabaseError,
    EnrollmentValidationError,
    EntityNotFoundError,
    PatientMergeError,
    PatientNotFoundError,
    ProgramNotFoundError,
    ValidationError,
)

__all__ = [
    "BusinessRuleViolationError",
    "ChartmergeError",
    "DatabaseError",
    "EnrollmentValidationError",
    "EntityNotFoundError",
    "PatientMergeError",
    "PatientNotFoundError",
    "ProgramNotFoundError",
    "ValidationError",
]
