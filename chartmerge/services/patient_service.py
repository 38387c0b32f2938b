"""Service layer for patient-related business logic, including record merges."""

from collections.abc import Sequence
from typing import Any, NoReturn

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import set_committed_value

from ..exceptions import DatabaseError, PatientMergeError, ValidationError
from ..models import Patient, PatientCreate, PatientMergeLog, ProgramEnrollment
from ..repositories import (
    EncounterRepository,
    PatientMergeLogRepository,
    PatientRepository,
    ProgramEnrollmentRepository,
)
from ..settings import Settings, settings
from ..utils.logger import logger
from .unit_of_work import UnitOfWork


class PatientService:
    """Service for patient-related business logic.

    A merge moves a duplicate patient's encounters and program enrollments to
    the preferred patient. Each step runs in its own savepoint of the
    unit of work: if an enrollment fails validation, that savepoint is rolled
    back, whatever earlier steps released is committed, the remaining
    enrollments are left alone, and the validation error is raised.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        patient_repo: PatientRepository,
        encounter_repo: EncounterRepository,
        enrollment_repo: ProgramEnrollmentRepository,
        merge_log_repo: PatientMergeLogRepository,
        creator: str | None = None,
        void_reason: str | None = None,
    ):
        """Initialize patient service with its collaborators.

        Args:
            uow: Unit of work owning the session's transaction
            patient_repo: Patient repository instance
            encounter_repo: Encounter repository instance
            enrollment_repo: Program enrollment repository instance
            merge_log_repo: Merge log repository instance
            creator: Name recorded on merge logs
            void_reason: Reason set on merged duplicates, formatted with ``preferred_id``
        """
        self.uow = uow
        self.patient_repo = patient_repo
        self.encounter_repo = encounter_repo
        self.enrollment_repo = enrollment_repo
        self.merge_log_repo = merge_log_repo
        self.creator = creator or settings.merge_creator
        self.void_reason = void_reason or settings.merge_void_reason

    @classmethod
    def from_uow(
        cls, uow: UnitOfWork, config: Settings | None = None, creator: str | None = None
    ) -> "PatientService":
        """Build a service whose repositories share the unit of work's session.

        Args:
            uow: Unit of work to merge in
            config: Settings providing the default creator and void reason
            creator: Overrides ``config.merge_creator``
        """
        config = config or settings
        session = uow.session
        return cls(
            uow,
            PatientRepository(session),
            EncounterRepository(session),
            ProgramEnrollmentRepository(session),
            PatientMergeLogRepository(session),
            creator=creator or config.merge_creator,
            void_reason=config.merge_void_reason,
        )

    async def get_patient(self, patient_id: int) -> Patient:
        """Get patient by ID.

        Raises:
            PatientNotFoundError: If patient doesn't exist
        """
        return await self.patient_repo.get(patient_id)

    async def create_patient(self, patient_data: PatientCreate | dict[str, Any]) -> Patient:
        """Create and commit a new patient.

        Args:
            patient_data: Validated create model or raw field dictionary

        Returns:
            Created patient
        """
        if isinstance(patient_data, dict):
            patient_data = PatientCreate.model_validate(patient_data)
        patient = Patient.model_validate(patient_data)
        return await self.patient_repo.create(patient)

    # Merge operations

    async def merge_patients(self, preferred: Patient, duplicate: Patient) -> PatientMergeLog:
        """Merge ``duplicate`` into ``preferred``.

        Unsaved changes to the duplicate's enrollments are saved together with
        their move, so a change that fails validation is never written.

        Args:
            preferred: Patient record that is kept
            duplicate: Patient record whose data moves to ``preferred`` and which is then voided

        Returns:
            The committed merge log

        Raises:
            PatientNotFoundError: If either patient has no stored row
            PatientMergeError: If the patients are the same or either one is voided
            ValidationError: If an enrollment fails validation. Encounters and the
                enrollments saved before the failing one stay committed.
            DatabaseError: If the database rejects the merge; nothing is committed
        """
        preferred_id, duplicate_id = preferred.id, duplicate.id

        with self.uow.session.no_autoflush:
            preferred, duplicate = await self._check_mergeable(preferred, duplicate)
            enrollments = await self.enrollment_repo.get_by_patient(duplicate)
            held_edits = self._hold_unsaved_edits(enrollments)
        logger.info(f"Merging patient #{duplicate_id} into patient #{preferred_id}")

        try:
            encounter_ids = await self._move_encounters(preferred, duplicate)
            enrollment_ids = await self._move_enrollments(preferred, enrollments, held_edits)

            async with self.uow.nested("void-duplicate"):
                await self.patient_repo.void(
                    duplicate, self.void_reason.format(preferred_id=preferred_id)
                )
                merge_log = await self.merge_log_repo.add(
                    PatientMergeLog(
                        winner_id=preferred_id,
                        loser_id=duplicate_id,
                        creator=self.creator,
                        merged_data={
                            "encounters": encounter_ids,
                            "program_enrollments": enrollment_ids,
                        },
                    )
                )
        except ValidationError as e:
            logger.error(
                f"Merge of patient #{duplicate_id} into #{preferred_id} stopped: {e}. "
                "Keeping the steps completed before the failure"
            )
            try:
                await self.uow.commit()
            except SQLAlchemyError as commit_error:
                await self._abort(duplicate_id, commit_error)
            raise
        except SQLAlchemyError as e:
            await self._abort(duplicate_id, e)

        try:
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self._abort(duplicate_id, e)
        logger.info(
            f"Merged patient #{duplicate_id} into #{preferred_id}: "
            f"{len(encounter_ids)} encounters, {len(enrollment_ids)} program enrollments"
        )
        return merge_log

    async def merge_patients_by_id(self, preferred_id: int, duplicate_id: int) -> PatientMergeLog:
        """Load both patients and merge them.

        Raises:
            PatientNotFoundError: If either patient doesn't exist
        """
        preferred = await self.patient_repo.get(preferred_id)
        duplicate = await self.patient_repo.get(duplicate_id)
        return await self.merge_patients(preferred, duplicate)

    async def merge_many(
        self, preferred: Patient, duplicates: Sequence[Patient]
    ) -> list[PatientMergeLog]:
        """Merge several duplicates into ``preferred`` in order, stopping at the first failure."""
        return [await self.merge_patients(preferred, duplicate) for duplicate in duplicates]

    async def _check_mergeable(
        self, preferred: Patient, duplicate: Patient
    ) -> tuple[Patient, Patient]:
        """Validate the pair and return the session's own instances of both patients."""
        if preferred.id is None or duplicate.id is None:
            raise PatientMergeError("Both patients must be saved before they can be merged")
        if preferred.id == duplicate.id:
            raise PatientMergeError(f"Cannot merge patient #{preferred.id} into itself")

        # Both must still exist in storage, not only in memory
        loaded: list[Patient] = []
        for patient_id in (preferred.id, duplicate.id):
            patient = await self.patient_repo.get(patient_id)
            if patient.voided:
                raise PatientMergeError(
                    f"Patient #{patient.id} is voided ({patient.void_reason or 'no reason'})"
                )
            loaded.append(patient)
        return loaded[0], loaded[1]

    def _hold_unsaved_edits(
        self, enrollments: Sequence[ProgramEnrollment]
    ) -> dict[int, dict[str, Any]]:
        """Take pending column changes off ``enrollments`` and return them by enrollment id.

        Opening a savepoint flushes the session, which would write these
        changes without validation. ``_move_enrollments`` puts them back
        inside the enrollment's own savepoint.
        """
        held: dict[int, dict[str, Any]] = {}
        for enrollment in enrollments:
            state = inspect(enrollment)
            edits: dict[str, Any] = {}
            for column in state.mapper.column_attrs:
                history = state.attrs[column.key].history
                if not history.has_changes():
                    continue
                edits[column.key] = history.added[0] if history.added else None
                if history.deleted:
                    set_committed_value(enrollment, column.key, history.deleted[0])
                else:
                    # Original value was never loaded
                    self.uow.session.expire(enrollment, [column.key])
            if edits:
                held[enrollment.id] = edits  # type: ignore[index]
        return held

    async def _move_encounters(self, preferred: Patient, duplicate: Patient) -> list[int]:
        async with self.uow.nested("encounters"):
            encounter_ids = await self.encounter_repo.reassign_patient(duplicate, preferred)
        logger.info(f"Moved {len(encounter_ids)} encounters to patient #{preferred.id}")
        return encounter_ids

    async def _move_enrollments(
        self,
        preferred: Patient,
        enrollments: Sequence[ProgramEnrollment],
        held_edits: dict[int, dict[str, Any]],
    ) -> list[int]:
        moved: list[int] = []
        for enrollment in enrollments:
            # Read the id before the savepoint; a rollback expires the instance
            enrollment_id = enrollment.id
            async with self.uow.nested(f"enrollment-{enrollment_id}"):
                for key, value in held_edits.get(enrollment_id, {}).items():  # type: ignore[arg-type]
                    setattr(enrollment, key, value)
                enrollment.patient_id = preferred.id
                await self.enrollment_repo.save(enrollment)
            moved.append(enrollment_id)  # type: ignore[arg-type]
        logger.info(f"Moved {len(moved)} program enrollments to patient #{preferred.id}")
        return moved

    async def _abort(self, duplicate_id: int | None, error: SQLAlchemyError) -> NoReturn:
        logger.error(f"Database error while merging patient #{duplicate_id}: {error}")
        await self.uow.rollback()
        raise DatabaseError(
            f"Merge of patient #{duplicate_id} failed: {error}", patient_id=duplicate_id
        ) from error
