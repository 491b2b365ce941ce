"""Tests for relationship queries and endpoint rewriting."""

import pytest
import pytest_asyncio

from dossier_engine.repositories.relationship_repository import RelationshipRepository


@pytest.fixture
def repo(session) -> RelationshipRepository:
    return RelationshipRepository(session)


@pytest_asyncio.fixture
async def trio(person_service, dossier):
    return [
        await person_service.create_person(dossier.id, name)
        for name in ("Alder", "Birch", "Cedar")
    ]


@pytest.mark.asyncio
async def test_reassign_rewrites_both_positions(repo, relationship_service, dossier, trio):
    alder, birch, cedar = trio
    await relationship_service.create_relationship(dossier.id, birch.id, cedar.id, "colleague")
    await relationship_service.create_relationship(dossier.id, cedar.id, birch.id, "informant")
    await relationship_service.create_relationship(dossier.id, birch.id, birch.id, "alias-of")

    moved = await repo.reassign_person(birch.id, alder.id)

    assert moved == 4
    assert await repo.list_relationships(person_id=birch.id) == []
    tuples = {
        (r.person_a_id, r.person_b_id, r.relationship_type)
        for r in await repo.list_relationships(dossier_id=dossier.id)
    }
    assert tuples == {
        (alder.id, cedar.id, "colleague"),
        (cedar.id, alder.id, "informant"),
        (alder.id, alder.id, "alias-of"),
    }


@pytest.mark.asyncio
async def test_find_by_tuple_is_directional(repo, relationship_service, dossier, trio):
    alder, birch, _ = trio
    await relationship_service.create_relationship(dossier.id, alder.id, birch.id, "colleague")

    assert await repo.find_by_tuple(dossier.id, alder.id, birch.id, "colleague") is not None
    assert await repo.find_by_tuple(dossier.id, birch.id, alder.id, "colleague") is None


@pytest.mark.asyncio
async def test_stats(repo, relationship_service, dossier, trio):
    alder, birch, cedar = trio
    await relationship_service.create_relationship(
        dossier.id, alder.id, birch.id, "colleague", confidence_score=0.9
    )
    await relationship_service.create_relationship(
        dossier.id, birch.id, cedar.id, "colleague", confidence_score=0.4
    )
    await relationship_service.create_relationship(
        dossier.id, alder.id, cedar.id, "sibling", confidence_score=0.7
    )

    stats = await repo.get_stats(dossier.id, threshold=0.7)

    assert stats == {"total": 3, "types": 2, "confirmed": 2}
