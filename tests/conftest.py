"""Global test configuration: in-memory SQLite with working savepoints."""

from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Import all models to ensure metadata is populated
from chartmerge.models import *  # noqa: F403
from chartmerge.models import Encounter, Patient, Program, ProgramEnrollment
from chartmerge.services.patient_service import PatientService
from chartmerge.services.unit_of_work import UnitOfWork
from chartmerge.settings import Settings
from chartmerge.utils.db_manager import enable_sqlite_savepoints


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Test settings with in-memory SQLite."""
    return Settings(database_name=":memory:", debug=True, merge_creator="test-runner")


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession]:
    """Create test database session."""
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def uow(test_session) -> UnitOfWork:
    return UnitOfWork(test_session)


@pytest_asyncio.fixture
async def patient_service(uow, test_settings) -> PatientService:
    return PatientService.from_uow(uow, config=test_settings)


async def _add(session: AsyncSession, *entities: Any) -> None:
    session.add_all(entities)
    await session.commit()
    for entity in entities:
        await session.refresh(entity)


@pytest_asyncio.fixture
async def programs(test_session) -> dict[str, Program]:
    """Two active programs and one retired one."""
    hiv = Program(name="HIV Program", description="HIV care and treatment")
    tb = Program(name="TB Program", description="Tuberculosis treatment")
    retired = Program(name="Malaria Program", retired=True)
    await _add(test_session, hiv, tb, retired)
    return {"hiv": hiv, "tb": tb, "retired": retired}


@pytest_asyncio.fixture
async def clinic(test_session, programs) -> dict[str, Any]:
    """A preferred patient and its duplicate with encounters and enrollments.

    preferred: 1 encounter, 1 HIV enrollment
    duplicate: 3 encounters (one voided), HIV and TB enrollments
    """
    birthdate = date(1970, 1, 1)
    preferred = Patient(given_name="Johnny", family_name="Doe", gender="M", birthdate=birthdate)
    duplicate = Patient(given_name="John", family_name="Doe", gender="M", birthdate=birthdate)
    await _add(test_session, preferred, duplicate)

    now = datetime.now(UTC)
    encounters = [
        Encounter(patient_id=preferred.id, encounter_type="ADULTINITIAL", encounter_datetime=now),
        Encounter(
            patient_id=duplicate.id,
            encounter_type="ADULTINITIAL",
            encounter_datetime=now - timedelta(days=30),
        ),
        Encounter(
            patient_id=duplicate.id,
            encounter_type="ADULTRETURN",
            encounter_datetime=now - timedelta(days=10),
        ),
        Encounter(
            patient_id=duplicate.id,
            encounter_type="ADULTRETURN",
            encounter_datetime=now - timedelta(days=5),
            voided=True,
        ),
    ]
    enrolled = date.today() - timedelta(days=60)
    hiv_id, tb_id = programs["hiv"].id, programs["tb"].id
    enrollments = [
        ProgramEnrollment(
            patient_id=preferred.id, program_id=hiv_id, date_enrolled=enrolled, creator="admin"
        ),
        ProgramEnrollment(
            patient_id=duplicate.id, program_id=hiv_id, date_enrolled=enrolled, creator="admin"
        ),
        ProgramEnrollment(
            patient_id=duplicate.id, program_id=tb_id, date_enrolled=enrolled, creator="admin"
        ),
    ]
    await _add(test_session, *encounters, *enrollments)

    return {
        "preferred": preferred,
        "duplicate": duplicate,
        "encounters": encounters,
        "enrollments": enrollments,
    }
