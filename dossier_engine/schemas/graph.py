from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GraphNode(BaseModel):
    id: UUID
    name: str
    confidence_score: float


class GraphEdge(BaseModel):
    """Edge as rendered by the graph view; ``from``/``to`` are person ids."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    from_: UUID = Field(alias="from")
    to: UUID
    relationship_type: str
    confidence_score: float
    evidence_refs: List[str] = Field(default_factory=list)


class GraphResponse(BaseModel):
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
