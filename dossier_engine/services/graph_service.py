"""Relationship graph assembly for visualisation."""

from collections import defaultdict
from typing import Iterable, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.core.config import settings
from dossier_engine.core.exceptions import NotFoundError
from dossier_engine.repositories.dossier_repository import DossierRepository
from dossier_engine.repositories.person_repository import PersonRepository
from dossier_engine.repositories.relationship_repository import RelationshipRepository
from dossier_engine.schemas.graph import GraphEdge, GraphNode, GraphResponse
from dossier_engine.services.base_service import BaseService
from dossier_engine.utils.logging import get_logger

LOGGER = get_logger(__name__)


def expand_neighbourhood(
    focus: UUID,
    edges: Iterable[Tuple[UUID, UUID]],
    depth: int = 2,
) -> Set[UUID]:
    """Collect the ids reachable from ``focus`` in ``depth`` undirected rounds.

    Each round expands every id found so far by its neighbours on either
    side of an edge. This is breadth-limited reachability over plain id
    pairs, not a shortest-path search.

    Args:
        focus: Person id the traversal starts from
        edges: (from, to) id pairs; direction is ignored
        depth: Number of expansion rounds

    Returns:
        Set of reachable ids, including ``focus``
    """
    adjacency: dict[UUID, Set[UUID]] = defaultdict(set)
    for person_a, person_b in edges:
        adjacency[person_a].add(person_b)
        adjacency[person_b].add(person_a)

    connected = {focus}
    for _ in range(depth):
        frontier = list(connected)
        for person_id in frontier:
            connected |= adjacency.get(person_id, set())
    return connected


class GraphService(BaseService):
    """Build the node/edge view of a dossier, optionally around one person."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.dossier_repo = DossierRepository(session)
        self.person_repo = PersonRepository(session)
        self.relationship_repo = RelationshipRepository(session)

    async def build_graph(
        self,
        dossier_id: UUID,
        focus: Optional[UUID] = None,
        depth: Optional[int] = None,
    ) -> GraphResponse:
        """Return persons as nodes and relationships as edges.

        Without ``focus`` the whole dossier is returned (persons capped at
        ``settings.graph.max_nodes``). With ``focus`` both lists are cut to
        the persons within ``depth`` hops (default ``settings.graph.focus_depth``)
        and the edges joining them.

        Raises:
            NotFoundError: If the dossier does not exist
        """
        depth = settings.graph.focus_depth if depth is None else depth

        async with self.reading():
            if await self.dossier_repo.get_by_id(dossier_id) is None:
                raise NotFoundError(f"Dossier {dossier_id} not found")
            persons = await self.person_repo.list_persons(
                dossier_id=dossier_id, limit=settings.graph.max_nodes
            )
            relationships = await self.relationship_repo.list_relationships(
                dossier_id=dossier_id
            )

        if focus is not None:
            connected = expand_neighbourhood(
                focus,
                ((r.person_a_id, r.person_b_id) for r in relationships),
                depth=depth,
            )
            persons = [p for p in persons if p.id in connected]
            relationships = [
                r
                for r in relationships
                if r.person_a_id in connected and r.person_b_id in connected
            ]

        LOGGER.debug(
            "Relationship graph assembled",
            extra={
                "dossier_id": str(dossier_id),
                "focus": str(focus) if focus else None,
                "nodes": len(persons),
                "edges": len(relationships),
            },
        )
        return GraphResponse(
            nodes=[
                GraphNode(id=p.id, name=p.canonical_name, confidence_score=p.confidence_score)
                for p in persons
            ],
            edges=[
                GraphEdge(
                    id=r.id,
                    from_=r.person_a_id,
                    to=r.person_b_id,
                    relationship_type=r.relationship_type,
                    confidence_score=r.confidence_score,
                    evidence_refs=r.evidence_refs or [],
                )
                for r in relationships
            ],
        )
