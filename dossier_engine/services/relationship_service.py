"""Relationship store: typed edges between persons of one dossier."""

from datetime import date
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.core.exceptions import ConflictError, NotFoundError, ValidationError
from dossier_engine.repositories.dossier_repository import DossierRepository
from dossier_engine.repositories.person_repository import PersonRepository
from dossier_engine.repositories.relationship_repository import RelationshipRepository
from dossier_engine.schemas.relationship import (
    RelationshipCreate,
    RelationshipPatch,
    RelationshipResponse,
)
from dossier_engine.services.base_service import BaseService
from dossier_engine.utils.logging import get_logger

LOGGER = get_logger(__name__)


class RelationshipService(BaseService):
    """Create, list, update and delete relationships.

    (dossier, person_a, person_b, type) is unique: creating or retyping an
    edge onto an existing tuple raises ``ConflictError``.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.dossier_repo = DossierRepository(session)
        self.person_repo = PersonRepository(session)
        self.relationship_repo = RelationshipRepository(session)

    async def create_relationship(
        self,
        dossier_id: UUID,
        person_a_id: UUID,
        person_b_id: UUID,
        relationship_type: str,
        description: Optional[str] = None,
        confidence_score: float = 0.5,
        evidence_refs: Optional[List[str]] = None,
        valid_from: Optional[date] = None,
        valid_to: Optional[date] = None,
    ) -> RelationshipResponse:
        """Link two persons of ``dossier_id``.

        Raises:
            NotFoundError: If the dossier does not exist
            ValidationError: If the type is empty or an endpoint is missing
                or belongs to another dossier
            ConflictError: If the same (dossier, a, b, type) edge exists
        """
        edge = self.parse(
            RelationshipCreate,
            {
                "person_a_id": person_a_id,
                "person_b_id": person_b_id,
                "relationship_type": relationship_type,
                "description": description,
                "confidence_score": confidence_score,
                "evidence_refs": evidence_refs or [],
                "valid_from": valid_from,
                "valid_to": valid_to,
            },
        )

        async with self.transaction():
            if await self.dossier_repo.get_by_id(dossier_id) is None:
                raise NotFoundError(f"Dossier {dossier_id} not found")

            endpoints = await self.person_repo.get_many([edge.person_a_id, edge.person_b_id])
            for person_id in (edge.person_a_id, edge.person_b_id):
                person = endpoints.get(person_id)
                if person is None:
                    raise ValidationError(f"Person {person_id} does not exist")
                if person.dossier_id != dossier_id:
                    raise ValidationError(
                        f"Person {person_id} does not belong to dossier {dossier_id}"
                    )

            existing = await self.relationship_repo.find_by_tuple(
                dossier_id, edge.person_a_id, edge.person_b_id, edge.relationship_type
            )
            if existing is not None:
                raise ConflictError("This relationship already exists")

            relationship = await self.relationship_repo.create(
                dossier_id=dossier_id, **edge.model_dump()
            )

        LOGGER.info(
            "Relationship created",
            extra={
                "relationship_id": str(relationship.id),
                "dossier_id": str(dossier_id),
                "relationship_type": relationship.relationship_type,
            },
        )
        return RelationshipResponse.model_validate(relationship)

    async def get_relationship(self, relationship_id: UUID) -> Optional[RelationshipResponse]:
        async with self.reading():
            relationship = await self.relationship_repo.get_by_id(relationship_id)
        return RelationshipResponse.model_validate(relationship) if relationship else None

    async def list_relationships(
        self,
        dossier_id: Optional[UUID] = None,
        person_id: Optional[UUID] = None,
        relationship_type: Optional[str] = None,
    ) -> List[RelationshipResponse]:
        """List edges newest first; a person filter matches either endpoint."""
        async with self.reading():
            relationships = await self.relationship_repo.list_relationships(
                dossier_id=dossier_id,
                person_id=person_id,
                relationship_type=relationship_type,
            )
        return [RelationshipResponse.model_validate(r) for r in relationships]

    async def update_relationship(self, relationship_id: UUID, patch: Any) -> RelationshipResponse:
        """Patch type, description, confidence or validity window.

        Raises:
            NotFoundError: If the relationship does not exist
            ValidationError: If a patched value is invalid or the window is inverted
            ConflictError: If a new type collides with an existing edge
        """
        values = self.parse(RelationshipPatch, patch).model_dump(exclude_unset=True)
        async with self.transaction():
            relationship = await self.relationship_repo.get_by_id(relationship_id)
            if relationship is None:
                raise NotFoundError(f"Relationship {relationship_id} not found")

            valid_from = values.get("valid_from", relationship.valid_from)
            valid_to = values.get("valid_to", relationship.valid_to)
            if valid_from and valid_to and valid_to < valid_from:
                raise ValidationError("valid_to must not precede valid_from")

            new_type = values.get("relationship_type")
            if new_type is not None and new_type != relationship.relationship_type:
                clash = await self.relationship_repo.find_by_tuple(
                    relationship.dossier_id,
                    relationship.person_a_id,
                    relationship.person_b_id,
                    new_type,
                )
                if clash is not None:
                    raise ConflictError("This relationship already exists")

            if values:
                relationship = await self.relationship_repo.update(relationship, values)
        return RelationshipResponse.model_validate(relationship)

    async def delete_relationship(self, relationship_id: UUID) -> None:
        """Hard-delete one edge. Attributes are not touched."""
        async with self.transaction():
            if not await self.relationship_repo.delete(relationship_id):
                raise NotFoundError(f"Relationship {relationship_id} not found")
