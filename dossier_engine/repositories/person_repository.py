import uuid
from typing import Optional, List, Sequence

from sqlalchemy import select, delete, or_, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.database.models import (
    Person,
    PersonAttribute,
    PersonMedia,
    PersonRelationship,
)
from dossier_engine.repositories.base_repository import BaseRepository


class PersonRepository(BaseRepository[Person]):
    """Repository for managing Person records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Person)

    async def list_persons(
        self,
        dossier_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Person]:
        """List persons ordered by canonical name.

        ``search`` matches a case-insensitive substring of the canonical
        name or any alias exactly. Aliases live in a JSON column, so the
        search is applied after loading the dossier's persons and the page
        is cut afterwards.
        """
        if not search:
            return await self.get_all(
                skip=offset,
                limit=limit,
                filters={"dossier_id": dossier_id},
                order_by=Person.canonical_name.asc(),
            )

        candidates = await self.get_all(
            filters={"dossier_id": dossier_id},
            order_by=Person.canonical_name.asc(),
        )
        needle = search.lower()
        matches = [
            person
            for person in candidates
            if needle in person.canonical_name.lower() or search in (person.aliases or [])
        ]
        return matches[offset:offset + limit]

    async def get_many(self, ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, Person]:
        """Bulk fetch persons by id."""
        if not ids:
            return {}
        result = await self.session.execute(select(Person).where(Person.id.in_(list(ids))))
        return {person.id: person for person in result.scalars().all()}

    async def append_merged_from(self, person: Person, merged_id: uuid.UUID) -> Person:
        """Record ``merged_id`` as absorbed into ``person``."""
        # Reassign rather than mutate so the JSON column is marked dirty
        return await self.update(
            person, {"merged_from": [*(person.merged_from or []), str(merged_id)]}
        )

    async def delete_with_children(self, person_id: uuid.UUID) -> bool:
        """Delete a person together with its attributes, media links and edges."""
        await self.session.execute(
            delete(PersonRelationship).where(
                or_(
                    PersonRelationship.person_a_id == person_id,
                    PersonRelationship.person_b_id == person_id,
                )
            )
        )
        await self.session.execute(
            delete(PersonAttribute).where(PersonAttribute.person_id == person_id)
        )
        await self.session.execute(
            delete(PersonMedia).where(PersonMedia.person_id == person_id)
        )
        return await self.delete(person_id)

    async def get_stats(self, dossier_id: uuid.UUID, threshold: float) -> dict:
        """Count persons in a dossier, total and at or above ``threshold``."""
        query = select(
            func.count(Person.id),
            func.count(case((Person.confidence_score >= threshold, 1))),
        ).where(Person.dossier_id == dossier_id)
        total, high_confidence = (await self.session.execute(query)).one()
        return {"total": total, "high_confidence": high_confidence}
