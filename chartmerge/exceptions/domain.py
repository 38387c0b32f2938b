"""
Domain exceptions for business logic layer.

These exceptions are used in repositories and services to represent
business logic errors without coupling to any transport layer.
"""


class ChartmergeError(Exception):
    """Base exception for all Chartmerge-specific errors."""


# Base domain exceptions
class EntityNotFoundError(ChartmergeError):
    """Raised when an entity is not found in the database."""

    pass


class ValidationError(ChartmergeError):
    """Raised when data validation fails."""

    pass


class BusinessRuleViolationError(ChartmergeError):
    """Raised when a business rule is violated."""

    pass


# Patient exceptions
class PatientNotFoundError(EntityNotFoundError):
    """Raised when a patient is not found."""

    def __init__(self, patient_id: int) -> None:
        super().__init__(f"Patient with ID '{patient_id}' not found")


class PatientMergeError(BusinessRuleViolationError):
    """Raised when two patients cannot be merged."""

    pass


# Program exceptions
class ProgramNotFoundError(EntityNotFoundError):
    """Raised when a program is not found."""

    def __init__(self, program_id: int | str) -> None:
        super().__init__(f"Program '{program_id}' not found")


class EnrollmentValidationError(ValidationError):
    """Raised when a program enrollment is rejected on save."""

    def __init__(self, enrollment_id: int | None, reason: str) -> None:
        self.enrollment_id = enrollment_id
        self.reason = reason
        super().__init__(f"Program enrollment {enrollment_id or '<new>'} is invalid: {reason}")


# Database errors
class DatabaseError(ChartmergeError):
    """Raised when a database operation fails; wraps the engine's error."""

    def __init__(self, message: str, patient_id: int | None = None) -> None:
        self.patient_id = patient_id
        super().__init__(message)
