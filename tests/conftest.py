"""Shared test fixtures for async databases, sessions and seeded voter data."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from constituency_api.core.config import Settings
from constituency_api.core.database import enable_sqlite_wal
from constituency_api.models.base import Base
from constituency_api.models.part_number import PartNumber
from constituency_api.models.voter import Voter


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        export_dir=str(tmp_path / "exports"),
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def file_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """File-backed WAL SQLite engine, for tests that read and write from separate sessions."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    enable_sqlite_wal(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(file_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the file-backed engine."""
    return async_sessionmaker(file_engine, expire_on_commit=False)


# (epic, name, gender, age, primary mobile, secondary mobile, part, ac, religion, voted)
VOTER_ROWS = [
    ("EPC0000001", "Anita Sharma", "F", 34, "9800000001", None, "101", "45", "Hindu", True),
    ("EPC0000002", "Bhavna Patel", "F", 28, "", "9800000002", "102", "45", "Hindu", False),
    ("EPC0000003", "Chitra Rao", "F", 61, None, None, "101", "45", "Christian", True),
    ("EPC0000004", "Deepak Kumar", "M", 45, "9800000004", None, "101", "45", "Hindu", True),
    ("EPC0000005", "Esha Khan", "F", 22, None, "", "102", "45", "Muslim", False),
    ("EPC0000006", "Farhan Ali", "M", 30, "9800000006", "9800000016", "102", "45", "Muslim", True),
    ("EPC0000007", "Gauri Nair", "O", 39, "9800000007", None, None, "46", None, False),
    ("EPC0000008", "Harish Iyer", "M", 70, None, None, "101", "45", "Hindu", False),
]


async def seed_voters(session: AsyncSession) -> None:
    """Insert two polling parts and the VOTER_ROWS voters."""
    session.add_all(
        [
            PartNumber(part_no="101", ward_no="W1", booth_name="Government School, Room 1"),
            PartNumber(part_no="102", ward_no="W2", booth_name="Community Hall"),
        ]
    )
    await session.flush()
    for epic, name, gender, age, primary, secondary, part, ac, religion, voted in VOTER_ROWS:
        session.add(
            Voter(
                epic_number=epic,
                full_name=name,
                relation_type="Father",
                relation_name=f"Father of {name.split()[0]}",
                gender=gender,
                age=age,
                mobile_no_primary=primary,
                mobile_no_secondary=secondary,
                part_no=part,
                ac_no=ac,
                religion=religion,
                is_voted_2024=voted,
                house_number=f"{epic[-2:]}/A",
                address="Main Road",
                pincode="560001",
            )
        )
    await session.commit()


@pytest.fixture
def voter_seeder() -> Callable[[AsyncSession], Awaitable[None]]:
    """The seed_voters helper, for tests that build their own database."""
    return seed_voters


@pytest.fixture
async def seeded_session(async_session: AsyncSession) -> AsyncSession:
    """In-memory session with voter data."""
    await seed_voters(async_session)
    return async_session


@pytest.fixture
async def seeded_factory(session_factory: async_sessionmaker[AsyncSession]) -> async_sessionmaker[AsyncSession]:
    """File-backed session factory with voter data."""
    async with session_factory() as session:
        await seed_voters(session)
    return session_factory
