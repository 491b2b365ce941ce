import uuid
from typing import Optional, List

from sqlalchemy import select, update, or_, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.database.models import PersonRelationship
from dossier_engine.repositories.base_repository import BaseRepository


class RelationshipRepository(BaseRepository[PersonRelationship]):
    """Repository for managing PersonRelationship records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PersonRelationship)

    async def find_by_tuple(
        self,
        dossier_id: uuid.UUID,
        person_a_id: uuid.UUID,
        person_b_id: uuid.UUID,
        relationship_type: str,
    ) -> Optional[PersonRelationship]:
        """Get the first edge matching the unique (dossier, a, b, type) tuple."""
        query = (
            select(PersonRelationship)
            .where(
                PersonRelationship.dossier_id == dossier_id,
                PersonRelationship.person_a_id == person_a_id,
                PersonRelationship.person_b_id == person_b_id,
                PersonRelationship.relationship_type == relationship_type,
            )
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_relationships(
        self,
        dossier_id: Optional[uuid.UUID] = None,
        person_id: Optional[uuid.UUID] = None,
        relationship_type: Optional[str] = None,
    ) -> List[PersonRelationship]:
        """List edges, newest first.

        ``person_id`` matches either endpoint.
        """
        query = select(PersonRelationship)
        if dossier_id is not None:
            query = query.where(PersonRelationship.dossier_id == dossier_id)
        if person_id is not None:
            query = query.where(
                or_(
                    PersonRelationship.person_a_id == person_id,
                    PersonRelationship.person_b_id == person_id,
                )
            )
        if relationship_type is not None:
            query = query.where(PersonRelationship.relationship_type == relationship_type)
        query = query.order_by(PersonRelationship.created_at.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def reassign_person(self, from_person_id: uuid.UUID, to_person_id: uuid.UUID) -> int:
        """Point every endpoint referencing one person at another.

        Both positions are rewritten. Resulting duplicate tuples are kept.

        Returns:
            Number of endpoint references rewritten
        """
        moved_a = await self.session.execute(
            update(PersonRelationship)
            .where(PersonRelationship.person_a_id == from_person_id)
            .values(person_a_id=to_person_id)
        )
        moved_b = await self.session.execute(
            update(PersonRelationship)
            .where(PersonRelationship.person_b_id == from_person_id)
            .values(person_b_id=to_person_id)
        )
        await self.session.flush()
        return moved_a.rowcount + moved_b.rowcount

    async def get_stats(self, dossier_id: uuid.UUID, threshold: float) -> dict:
        """Count a dossier's edges, distinct types and confirmed edges."""
        query = select(
            func.count(PersonRelationship.id),
            func.count(func.distinct(PersonRelationship.relationship_type)),
            func.count(case((PersonRelationship.confidence_score >= threshold, 1))),
        ).where(PersonRelationship.dossier_id == dossier_id)
        total, types, confirmed = (await self.session.execute(query)).one()
        return {"total": total, "types": types, "confirmed": confirmed}
