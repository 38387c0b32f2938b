"""Repositories for programs and program enrollments."""

from collections.abc import Iterable, Sequence

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..exceptions import ProgramNotFoundError
from ..models import Cohort, Patient, Program, ProgramEnrollment
from ..utils.validation import validate_enrollment
from .base import BaseRepository


class ProgramRepository(BaseRepository[Program]):
    """Repository for Program model operations."""

    def __init__(self, session: AsyncSession):
        """Initialize program repository with session."""
        super().__init__(session, Program)

    async def get(self, program_id: int) -> Program:
        """Get program by ID.

        Raises:
            ProgramNotFoundError: If program doesn't exist
        """
        program = await self.session.get(Program, program_id)
        if program is None:
            raise ProgramNotFoundError(program_id)
        return program

    async def get_by_name(self, name: str) -> Program:
        """Get program by its unique name.

        Raises:
            ProgramNotFoundError: If no program has that name
        """
        program = await self.get_by(name=name)
        if program is None:
            raise ProgramNotFoundError(name)
        return program

    async def get_all_programs(self, include_retired: bool = True) -> Sequence[Program]:
        """List programs ordered by id.

        Args:
            include_retired: Whether retired programs are returned
        """
        statement = select(Program)
        if not include_retired:
            statement = statement.where(Program.retired == False)  # noqa: E712
        result = await self.session.execute(statement.order_by(Program.id))
        return result.scalars().all()


class ProgramEnrollmentRepository(BaseRepository[ProgramEnrollment]):
    """Repository for ProgramEnrollment model operations."""

    def __init__(self, session: AsyncSession):
        """Initialize enrollment repository with session."""
        super().__init__(session, ProgramEnrollment)

    async def get_by_patient(
        self, patient: Patient, include_voided: bool = False
    ) -> Sequence[ProgramEnrollment]:
        """Get a patient's enrollments in id order.

        Args:
            patient: Owning patient
            include_voided: Whether voided enrollments are returned
        """
        statement = select(ProgramEnrollment).where(ProgramEnrollment.patient_id == patient.id)
        if not include_voided:
            statement = statement.where(ProgramEnrollment.voided == False)  # noqa: E712
        result = await self.session.execute(statement.order_by(ProgramEnrollment.id))
        return result.scalars().all()

    async def get_patient_programs(
        self,
        cohort: Cohort | None = None,
        programs: Iterable[Program] | None = None,
        include_voided: bool = False,
    ) -> Sequence[ProgramEnrollment]:
        """Get enrollments of the cohort's patients in the given programs.

        Args:
            cohort: Restrict to these patients; None means every patient
            programs: Restrict to these programs; None means any program.
                Enrollments without a program never match a program filter.
            include_voided: Whether voided enrollments are returned

        Returns:
            Matching enrollments in id order
        """
        statement = select(ProgramEnrollment)
        if cohort is not None:
            statement = statement.where(
                ProgramEnrollment.patient_id.in_(list(cohort))  # type: ignore
            )
        if programs is not None:
            program_ids = [program.id for program in programs]
            statement = statement.where(
                ProgramEnrollment.program_id.in_(program_ids)  # type: ignore
            )
        if not include_voided:
            statement = statement.where(ProgramEnrollment.voided == False)  # noqa: E712
        result = await self.session.execute(statement.order_by(ProgramEnrollment.id))
        return result.scalars().all()

    async def count_by_patient(self, patient: Patient, include_voided: bool = False) -> int:
        """Count a patient's enrollments."""
        statement = (
            select(func.count())
            .select_from(ProgramEnrollment)
            .where(ProgramEnrollment.patient_id == patient.id)
        )
        if not include_voided:
            statement = statement.where(ProgramEnrollment.voided == False)  # noqa: E712
        result = await self.session.execute(statement)
        return result.scalar() or 0

    async def save(self, enrollment: ProgramEnrollment) -> ProgramEnrollment:
        """Validate and flush an enrollment in the current transaction.

        Raises:
            EnrollmentValidationError: If the enrollment is invalid; nothing is flushed
        """
        validate_enrollment(enrollment)
        return await self.add(enrollment)

    async def enroll(self, enrollment: ProgramEnrollment) -> ProgramEnrollment:
        """Validate and commit a new enrollment.

        Raises:
            EnrollmentValidationError: If the enrollment is invalid
        """
        validate_enrollment(enrollment)
        return await self.create(enrollment)
