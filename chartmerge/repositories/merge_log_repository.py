"""Repository for patient merge audit records."""

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..models import Patient, PatientMergeLog
from .base import BaseRepository


class PatientMergeLogRepository(BaseRepository[PatientMergeLog]):
    """Repository for PatientMergeLog model operations."""

    def __init__(self, session: AsyncSession):
        """Initialize merge log repository with session."""
        super().__init__(session, PatientMergeLog)

    async def get_by_winner(self, patient: Patient) -> Sequence[PatientMergeLog]:
        """Merges that kept ``patient`` as the preferred record, newest first."""
        statement = (
            select(PatientMergeLog)
            .where(PatientMergeLog.winner_id == patient.id)
            .order_by(PatientMergeLog.id.desc())  # type: ignore
        )
        result = await self.session.execute(statement)
        return result.scalars().all()

    async def get_by_loser(self, patient: Patient) -> PatientMergeLog | None:
        """The merge that voided ``patient``, if any."""
        return await self.get_by(loser_id=patient.id)  # type: ignore[arg-type]
