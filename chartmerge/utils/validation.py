"""
Save-time validation for clinical records.

Column constraints are deliberately loose for enrollments; these checks run
when an enrollment is saved and raise domain validation errors.
"""

from datetime import date

from ..exceptions import EnrollmentValidationError
from ..models import ProgramEnrollment
from ..utils.logger import logger


def validate_enrollment(enrollment: ProgramEnrollment, today: date | None = None) -> None:
    """
    Check an enrollment before it is written.

    Args:
        enrollment: The enrollment to check
        today: Reference date for the "not in the future" rule

    Raises:
        EnrollmentValidationError: If a required reference is unset or the dates are inconsistent
    """
    today = today or date.today()
    reason: str | None = None

    if enrollment.program_id is None:
        reason = "program is required"
    elif enrollment.patient_id is None:
        reason = "patient is required"
    elif enrollment.date_enrolled is None:
        reason = "enrollment date is required"
    elif enrollment.date_enrolled > today:
        reason = f"enrollment date {enrollment.date_enrolled} is in the future"
    elif enrollment.date_completed is not None and enrollment.date_completed < enrollment.date_enrolled:
        reason = "completion date precedes enrollment date"

    if reason is not None:
        logger.warning(f"Rejected program enrollment {enrollment.id}: {reason}")
        raise EnrollmentValidationError(enrollment.id, reason)
