"""Tests for relationship creation, uniqueness and dossier scoping."""

import pytest
import pytest_asyncio
from datetime import date
from uuid import uuid4

from dossier_engine.core.exceptions import ConflictError, NotFoundError, ValidationError


@pytest_asyncio.fixture
async def pair(person_service, dossier):
    alice = await person_service.create_person(dossier.id, "Alice Moreau")
    bob = await person_service.create_person(dossier.id, "Bob Keane")
    return alice, bob


@pytest.mark.asyncio
async def test_create_relationship(relationship_service, dossier, pair):
    alice, bob = pair

    relationship = await relationship_service.create_relationship(
        dossier.id,
        alice.id,
        bob.id,
        "business_partner",
        evidence_refs=["contract-2019-44"],
        valid_from=date(2019, 5, 1),
    )

    assert relationship.dossier_id == dossier.id
    assert relationship.person_a_id == alice.id
    assert relationship.person_b_id == bob.id
    assert relationship.confidence_score == 0.5
    assert relationship.evidence_refs == ["contract-2019-44"]


@pytest.mark.asyncio
async def test_duplicate_tuple_conflicts(relationship_service, dossier, pair):
    alice, bob = pair
    await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "colleague")

    with pytest.raises(ConflictError):
        await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "colleague")

    edges = await relationship_service.list_relationships(dossier_id=dossier.id)
    assert len(edges) == 1


@pytest.mark.asyncio
async def test_reverse_direction_and_other_type_are_distinct(relationship_service, dossier, pair):
    alice, bob = pair
    await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "colleague")
    await relationship_service.create_relationship(dossier.id, bob.id, alice.id, "colleague")
    await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "sibling")

    assert len(await relationship_service.list_relationships(dossier_id=dossier.id)) == 3


@pytest.mark.asyncio
async def test_cross_dossier_endpoints_rejected_for_either_scope(
    person_service, relationship_service, dossier, other_dossier
):
    alice = await person_service.create_person(dossier.id, "Alice Moreau")
    outsider = await person_service.create_person(other_dossier.id, "Outsider")

    for scope in (dossier.id, other_dossier.id):
        with pytest.raises(ValidationError):
            await relationship_service.create_relationship(scope, alice.id, outsider.id, "colleague")


@pytest.mark.asyncio
async def test_missing_endpoint_rejected(relationship_service, dossier, pair):
    alice, _ = pair
    with pytest.raises(ValidationError):
        await relationship_service.create_relationship(dossier.id, alice.id, uuid4(), "colleague")


@pytest.mark.asyncio
async def test_missing_type_rejected(relationship_service, dossier, pair):
    alice, bob = pair
    with pytest.raises(ValidationError):
        await relationship_service.create_relationship(dossier.id, alice.id, bob.id, " ")


@pytest.mark.asyncio
async def test_missing_dossier_raises_not_found(relationship_service, pair):
    alice, bob = pair
    with pytest.raises(NotFoundError):
        await relationship_service.create_relationship(uuid4(), alice.id, bob.id, "colleague")


@pytest.mark.asyncio
async def test_person_filter_matches_either_endpoint(person_service, relationship_service, dossier, pair):
    alice, bob = pair
    carla = await person_service.create_person(dossier.id, "Carla Dunn")
    await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "colleague")
    await relationship_service.create_relationship(dossier.id, carla.id, alice.id, "sibling")
    await relationship_service.create_relationship(dossier.id, bob.id, carla.id, "neighbour")

    for_alice = await relationship_service.list_relationships(person_id=alice.id)
    siblings = await relationship_service.list_relationships(
        dossier_id=dossier.id, relationship_type="sibling"
    )

    assert {r.relationship_type for r in for_alice} == {"colleague", "sibling"}
    assert len(siblings) == 1


@pytest.mark.asyncio
async def test_list_for_unknown_dossier_is_empty(relationship_service):
    assert await relationship_service.list_relationships(dossier_id=uuid4()) == []


@pytest.mark.asyncio
async def test_update_relationship_whitelist(relationship_service, dossier, pair):
    alice, bob = pair
    relationship = await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "colleague")

    updated = await relationship_service.update_relationship(
        relationship.id,
        {"description": "Same procurement desk", "confidence_score": 0.9, "person_a_id": str(uuid4())},
    )

    assert updated.description == "Same procurement desk"
    assert updated.confidence_score == 0.9
    assert updated.person_a_id == alice.id


@pytest.mark.asyncio
async def test_retyping_onto_existing_tuple_conflicts(relationship_service, dossier, pair):
    alice, bob = pair
    await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "colleague")
    other = await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "friend")

    with pytest.raises(ConflictError):
        await relationship_service.update_relationship(other.id, {"relationship_type": "colleague"})


@pytest.mark.asyncio
async def test_delete_relationship_leaves_attributes(person_service, relationship_service, dossier, pair):
    alice, bob = pair
    await person_service.create_attribute(alice.id, "email", "alice@example.org")
    relationship = await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "colleague")

    await relationship_service.delete_relationship(relationship.id)

    assert await relationship_service.get_relationship(relationship.id) is None
    assert len(await person_service.list_attributes(person_id=alice.id)) == 1
    with pytest.raises(NotFoundError):
        await relationship_service.delete_relationship(relationship.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["relationship_type", "confidence_score"])
async def test_update_rejects_null_for_required_fields(relationship_service, dossier, pair, field):
    alice, bob = pair
    edge = await relationship_service.create_relationship(dossier.id, alice.id, bob.id, "colleague")

    with pytest.raises(ValidationError):
        await relationship_service.update_relationship(edge.id, {field: None})

    unchanged = await relationship_service.get_relationship(edge.id)
    assert unchanged.relationship_type == "colleague"
    assert unchanged.confidence_score == 0.5


@pytest.mark.asyncio
async def test_create_rejects_inverted_window(relationship_service, dossier, pair):
    alice, bob = pair

    with pytest.raises(ValidationError):
        await relationship_service.create_relationship(
            dossier.id,
            alice.id,
            bob.id,
            "colleague",
            valid_from=date(2022, 1, 1),
            valid_to=date(2021, 1, 1),
        )


@pytest.mark.asyncio
async def test_update_rejects_inverted_window(relationship_service, dossier, pair):
    alice, bob = pair
    edge = await relationship_service.create_relationship(
        dossier.id, alice.id, bob.id, "colleague", valid_from=date(2022, 1, 1)
    )

    with pytest.raises(ValidationError):
        await relationship_service.update_relationship(edge.id, {"valid_to": "2021-06-30"})

    assert (await relationship_service.get_relationship(edge.id)).valid_to is None
