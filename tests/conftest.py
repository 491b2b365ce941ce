"""Pytest configuration and shared fixtures."""

import os

# Point the engine at SQLite BEFORE importing the package
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio

from dossier_engine.core.database import Base, build_engine, build_session_maker
from dossier_engine.database import models  # noqa: F401
from dossier_engine.services.dossier_service import DossierService
from dossier_engine.services.person_service import PersonService
from dossier_engine.services.relationship_service import RelationshipService


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def dossier_service(session) -> DossierService:
    return DossierService(session)


@pytest.fixture
def person_service(session) -> PersonService:
    return PersonService(session)


@pytest.fixture
def relationship_service(session) -> RelationshipService:
    return RelationshipService(session)


@pytest_asyncio.fixture
async def dossier(dossier_service):
    """An active dossier created by investigator-1."""
    return await dossier_service.create_dossier(
        title="Harbour contracts", description="Port authority tenders", created_by="investigator-1"
    )


@pytest_asyncio.fixture
async def other_dossier(dossier_service):
    return await dossier_service.create_dossier(title="Unrelated case", created_by="investigator-2")
