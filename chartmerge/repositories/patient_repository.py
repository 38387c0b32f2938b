"""Repository for Patient-specific database operations."""

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..exceptions import PatientNotFoundError
from ..models import Patient
from ..models.base import utcnow
from .base import BaseRepository


class PatientRepository(BaseRepository[Patient]):
    """Repository for Patient model operations."""

    def __init__(self, session: AsyncSession):
        """Initialize patient repository with session."""
        super().__init__(session, Patient)

    async def get(self, patient_id: int) -> Patient:
        """Get patient by ID.

        Raises:
            PatientNotFoundError: If patient doesn't exist
        """
        patient = await self.session.get(Patient, patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)
        return patient

    async def find_by_name(self, name: str, include_voided: bool = False) -> Sequence[Patient]:
        """Find patients whose given or family name contains ``name``.

        Args:
            name: Name fragment to search
            include_voided: Whether voided (merged away) patients are returned

        Returns:
            List of patients
        """
        pattern = f"%{name}%"
        statement = select(Patient).where(
            (Patient.given_name.ilike(pattern))  # type: ignore
            | (Patient.family_name.ilike(pattern))  # type: ignore
        )
        if not include_voided:
            statement = statement.where(Patient.voided == False)  # noqa: E712
        result = await self.session.execute(statement.order_by(Patient.id))
        return result.scalars().all()

    async def void(self, patient: Patient, reason: str) -> Patient:
        """Mark a patient voided within the current transaction.

        Args:
            patient: Patient to void
            reason: Why the record was voided

        Returns:
            The voided patient, flushed but not committed
        """
        patient.voided = True
        patient.void_reason = reason
        patient.date_voided = utcnow()
        return await self.add(patient)
