"""Tests for graph assembly and focus neighbourhoods."""

import pytest
import pytest_asyncio
from uuid import uuid4

from dossier_engine.core.exceptions import NotFoundError
from dossier_engine.services.graph_service import GraphService, expand_neighbourhood


class TestExpandNeighbourhood:
    """Reachability over plain id pairs."""

    def setup_method(self):
        self.a, self.b, self.c, self.d, self.e = (uuid4() for _ in range(5))
        self.chain = [(self.a, self.b), (self.b, self.c), (self.c, self.d), (self.d, self.e)]

    def test_depth_two_from_chain_end(self):
        assert expand_neighbourhood(self.a, self.chain, depth=2) == {self.a, self.b, self.c}

    def test_direction_is_ignored(self):
        reversed_chain = [(b, a) for a, b in self.chain]
        assert expand_neighbourhood(self.a, reversed_chain, depth=2) == {self.a, self.b, self.c}

    def test_depth_zero_is_focus_only(self):
        assert expand_neighbourhood(self.c, self.chain, depth=0) == {self.c}

    def test_isolated_focus(self):
        loner = uuid4()
        assert expand_neighbourhood(loner, self.chain) == {loner}

    def test_middle_focus_reaches_whole_chain(self):
        assert expand_neighbourhood(self.c, self.chain, depth=2) == {
            self.a, self.b, self.c, self.d, self.e
        }


@pytest.fixture
def graph_service(session) -> GraphService:
    return GraphService(session)


@pytest_asyncio.fixture
async def chain(person_service, relationship_service, dossier):
    """Persons A-E linked A->B->C->D->E."""
    people = [
        await person_service.create_person(dossier.id, name, confidence_score=0.8)
        for name in ("Alder", "Birch", "Cedar", "Dogwood", "Elm")
    ]
    for left, right in zip(people, people[1:]):
        await relationship_service.create_relationship(
            dossier.id, left.id, right.id, "associate", evidence_refs=["ledger-3"]
        )
    return people


def names(graph) -> set:
    return {node.name for node in graph.nodes}


@pytest.mark.asyncio
async def test_whole_dossier_without_focus(graph_service, dossier, chain):
    graph = await graph_service.build_graph(dossier.id)

    assert names(graph) == {"Alder", "Birch", "Cedar", "Dogwood", "Elm"}
    assert len(graph.edges) == 4
    assert all(edge.evidence_refs == ["ledger-3"] for edge in graph.edges)


@pytest.mark.asyncio
async def test_focus_at_chain_end_keeps_two_hops(graph_service, dossier, chain):
    alder, birch, cedar, _, _ = chain

    graph = await graph_service.build_graph(dossier.id, focus=alder.id)

    assert names(graph) == {"Alder", "Birch", "Cedar"}
    assert {(e.from_, e.to) for e in graph.edges} == {(alder.id, birch.id), (birch.id, cedar.id)}


@pytest.mark.asyncio
async def test_explicit_depth(graph_service, dossier, chain):
    graph = await graph_service.build_graph(dossier.id, focus=chain[0].id, depth=3)

    assert names(graph) == {"Alder", "Birch", "Cedar", "Dogwood"}
    assert len(graph.edges) == 3


@pytest.mark.asyncio
async def test_focus_in_middle_returns_everything(graph_service, dossier, chain):
    graph = await graph_service.build_graph(dossier.id, focus=chain[2].id)

    assert len(graph.nodes) == 5
    assert len(graph.edges) == 4


@pytest.mark.asyncio
async def test_unknown_focus_yields_empty_graph(graph_service, dossier, chain):
    graph = await graph_service.build_graph(dossier.id, focus=uuid4())

    assert graph.nodes == []
    assert graph.edges == []


@pytest.mark.asyncio
async def test_other_dossiers_are_not_included(graph_service, person_service, dossier, other_dossier, chain):
    await person_service.create_person(other_dossier.id, "Outsider")

    graph = await graph_service.build_graph(other_dossier.id)

    assert names(graph) == {"Outsider"}
    assert graph.edges == []


@pytest.mark.asyncio
async def test_edges_serialise_with_from_key(graph_service, dossier, chain):
    graph = await graph_service.build_graph(dossier.id, focus=chain[0].id, depth=1)

    edge = graph.edges[0].model_dump(by_alias=True, mode="json")
    assert edge["from"] == str(chain[0].id)
    assert edge["to"] == str(chain[1].id)
    assert edge["relationship_type"] == "associate"


@pytest.mark.asyncio
async def test_missing_dossier_raises_not_found(graph_service):
    with pytest.raises(NotFoundError):
        await graph_service.build_graph(uuid4())
