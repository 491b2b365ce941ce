"""Tests for dossier lifecycle, cascade delete and statistics."""

import pytest
from uuid import uuid4

from dossier_engine.core.exceptions import NotFoundError, ValidationError
from dossier_engine.services.merge_service import MergeService
from dossier_engine.services.person_service import PersonService
from dossier_engine.services.relationship_service import RelationshipService


@pytest.mark.asyncio
async def test_create_dossier_defaults_to_active(dossier):
    assert dossier.status == "active"
    assert dossier.created_by == "investigator-1"
    assert dossier.created_at is not None


@pytest.mark.asyncio
async def test_create_dossier_rejects_blank_title(dossier_service):
    with pytest.raises(ValidationError):
        await dossier_service.create_dossier(title="   ", created_by="investigator-1")


@pytest.mark.asyncio
async def test_create_dossier_rejects_unknown_status(dossier_service):
    with pytest.raises(ValidationError):
        await dossier_service.create_dossier(title="Case", status="open")


@pytest.mark.asyncio
async def test_list_dossiers_filters_by_status(dossier_service, dossier, other_dossier):
    await dossier_service.update_dossier(other_dossier.id, {"status": "archived"})

    active = await dossier_service.list_dossiers(status="active")
    archived = await dossier_service.list_dossiers(status="archived")

    assert [d.id for d in active] == [dossier.id]
    assert [d.id for d in archived] == [other_dossier.id]


@pytest.mark.asyncio
async def test_update_dossier_ignores_fields_outside_whitelist(dossier_service, dossier):
    updated = await dossier_service.update_dossier(
        dossier.id,
        {"title": "Harbour contracts 2", "created_by": "someone-else", "id": str(uuid4())},
    )

    assert updated.id == dossier.id
    assert updated.title == "Harbour contracts 2"
    assert updated.created_by == "investigator-1"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "status"])
async def test_update_dossier_rejects_null_for_required_fields(dossier_service, dossier, field):
    with pytest.raises(ValidationError):
        await dossier_service.update_dossier(dossier.id, {field: None})

    unchanged = await dossier_service.get_dossier(dossier.id)
    assert unchanged.title == "Harbour contracts"
    assert unchanged.status == "active"


@pytest.mark.asyncio
async def test_update_missing_dossier_raises_not_found(dossier_service):
    with pytest.raises(NotFoundError):
        await dossier_service.update_dossier(uuid4(), {"title": "x"})


@pytest.mark.asyncio
async def test_get_missing_dossier_returns_none(dossier_service):
    assert await dossier_service.get_dossier(uuid4()) is None


@pytest.mark.asyncio
async def test_delete_dossier_cascades(session, session_factory, dossier_service, dossier, other_dossier):
    persons = PersonService(session)
    relationships = RelationshipService(session)
    alice = await persons.create_person(dossier.id, "Alice Moreau")
    bob = await persons.create_person(dossier.id, "Bob Keane")
    bobby = await persons.create_person(dossier.id, "Bobby Keane")
    survivor = await persons.create_person(other_dossier.id, "Unrelated Person")
    await persons.create_attribute(alice.id, "email", "alice@example.org")
    await persons.link_media(alice.id, "evidence/photo-1.jpg")
    await relationships.create_relationship(dossier.id, alice.id, bob.id, "business_partner")
    await MergeService(session).merge(bob.id, bobby.id, reason="same person")

    await dossier_service.delete_dossier(dossier.id)

    async with session_factory() as fresh:
        check = PersonService(fresh)
        assert await check.get_person(alice.id) is None
        assert await check.list_persons(dossier_id=dossier.id) == []
        assert await check.list_attributes(person_id=alice.id) == []
        assert await check.list_media(alice.id) == []
        assert await RelationshipService(fresh).list_relationships(dossier_id=dossier.id) == []
        assert await MergeService(fresh).list_merge_log(dossier.id) == []
        assert await check.get_person(survivor.id) is not None


@pytest.mark.asyncio
async def test_delete_missing_dossier_raises_not_found(dossier_service):
    with pytest.raises(NotFoundError):
        await dossier_service.delete_dossier(uuid4())


@pytest.mark.asyncio
async def test_dossier_stats(session, dossier_service, dossier):
    persons = PersonService(session)
    alice = await persons.create_person(dossier.id, "Alice Moreau", confidence_score=0.9)
    bob = await persons.create_person(dossier.id, "Bob Keane", confidence_score=0.4)
    await persons.create_attribute(alice.id, "email", "alice@example.org", verified=True)
    await persons.create_attribute(bob.id, "role", "harbour master")
    relationships = RelationshipService(session)
    await relationships.create_relationship(dossier.id, alice.id, bob.id, "colleague", confidence_score=0.8)
    await relationships.create_relationship(dossier.id, bob.id, alice.id, "sibling", confidence_score=0.3)

    stats = await dossier_service.get_dossier_stats(dossier.id)

    assert stats.dossier.id == dossier.id
    assert (stats.persons.total, stats.persons.high_confidence) == (2, 1)
    assert (stats.attributes.total, stats.attributes.verified) == (2, 1)
    assert (stats.relationships.total, stats.relationships.types, stats.relationships.confirmed) == (2, 2, 1)


@pytest.mark.asyncio
async def test_stats_for_missing_dossier_raise_not_found(dossier_service):
    with pytest.raises(NotFoundError):
        await dossier_service.get_dossier_stats(uuid4())
