import uuid
from typing import Optional, List

from sqlalchemy import select, update, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.database.models import Person, PersonAttribute
from dossier_engine.repositories.base_repository import BaseRepository


class AttributeRepository(BaseRepository[PersonAttribute]):
    """Repository for managing PersonAttribute records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PersonAttribute)

    async def list_attributes(
        self,
        person_id: Optional[uuid.UUID] = None,
        attribute_type: Optional[str] = None,
        verified: Optional[bool] = None,
    ) -> List[PersonAttribute]:
        """List attributes, newest first."""
        return await self.get_all(
            filters={
                "person_id": person_id,
                "attribute_type": attribute_type,
                "verified": verified,
            },
            order_by=PersonAttribute.created_at.desc(),
        )

    async def reassign_person(self, from_person_id: uuid.UUID, to_person_id: uuid.UUID) -> int:
        """Move every attribute of one person to another.

        Returns:
            Number of attributes moved
        """
        result = await self.session.execute(
            update(PersonAttribute)
            .where(PersonAttribute.person_id == from_person_id)
            .values(person_id=to_person_id)
        )
        await self.session.flush()
        return result.rowcount

    async def get_stats(self, dossier_id: uuid.UUID) -> dict:
        """Count attributes of a dossier's persons, total and verified."""
        query = (
            select(
                func.count(PersonAttribute.id),
                func.count(case((PersonAttribute.verified.is_(True), 1))),
            )
            .join(Person, Person.id == PersonAttribute.person_id)
            .where(Person.dossier_id == dossier_id)
        )
        total, verified = (await self.session.execute(query)).one()
        return {"total": total, "verified": verified}
