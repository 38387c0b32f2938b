"""Repository for Encounter-specific database operations."""

from collections.abc import Sequence

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..models import Encounter, Patient
from .base import BaseRepository


class EncounterRepository(BaseRepository[Encounter]):
    """Repository for Encounter model operations."""

    def __init__(self, session: AsyncSession):
        """Initialize encounter repository with session."""
        super().__init__(session, Encounter)

    async def get_by_patient(
        self, patient: Patient, include_voided: bool = False
    ) -> Sequence[Encounter]:
        """Get encounters of a patient, oldest first.

        Args:
            patient: Owning patient
            include_voided: Whether voided encounters are returned

        Returns:
            List of encounters
        """
        statement = select(Encounter).where(Encounter.patient_id == patient.id)
        if not include_voided:
            statement = statement.where(Encounter.voided == False)  # noqa: E712
        statement = statement.order_by(Encounter.encounter_datetime, Encounter.id)
        result = await self.session.execute(statement)
        return result.scalars().all()

    async def count_by_patient(self, patient: Patient, include_voided: bool = False) -> int:
        """Count encounters of a patient."""
        statement = (
            select(func.count()).select_from(Encounter).where(Encounter.patient_id == patient.id)
        )
        if not include_voided:
            statement = statement.where(Encounter.voided == False)  # noqa: E712
        result = await self.session.execute(statement)
        return result.scalar() or 0

    async def reassign_patient(self, from_patient: Patient, to_patient: Patient) -> list[int]:
        """Move every encounter of ``from_patient`` (voided ones included) to ``to_patient``.

        Runs in the caller's transaction and does not commit.

        Returns:
            Ids of the moved encounters
        """
        ids_result = await self.session.execute(
            select(Encounter.id).where(Encounter.patient_id == from_patient.id).order_by(Encounter.id)
        )
        encounter_ids = list(ids_result.scalars().all())
        if encounter_ids:
            await self.session.execute(
                update(Encounter)
                .where(Encounter.id.in_(encounter_ids))  # type: ignore
                .values(patient_id=to_patient.id)
            )
        return encounter_ids
