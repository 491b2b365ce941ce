import uuid
from typing import Optional, List

from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.database.models import (
    Dossier,
    Person,
    PersonAttribute,
    PersonMedia,
    PersonMergeLog,
    PersonRelationship,
)
from dossier_engine.repositories.base_repository import BaseRepository


class DossierRepository(BaseRepository[Dossier]):
    """Repository for managing Dossier records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Dossier)

    async def list_dossiers(
        self,
        status: Optional[str] = None,
        created_by: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dossier]:
        """List dossiers, newest first."""
        return await self.get_all(
            skip=offset,
            limit=limit,
            filters={"status": status, "created_by": created_by},
            order_by=Dossier.created_at.desc(),
        )

    async def delete_cascade(self, dossier_id: uuid.UUID) -> bool:
        """Delete a dossier and everything scoped to it.

        Children are removed explicitly, leaves first, so the cascade does
        not depend on the backend enforcing ON DELETE CASCADE.

        Returns:
            True if the dossier row was deleted
        """
        person_ids = select(Person.id).where(Person.dossier_id == dossier_id)

        await self.session.execute(
            delete(PersonMergeLog).where(PersonMergeLog.dossier_id == dossier_id)
        )
        await self.session.execute(
            delete(PersonRelationship).where(
                or_(
                    PersonRelationship.dossier_id == dossier_id,
                    PersonRelationship.person_a_id.in_(person_ids),
                    PersonRelationship.person_b_id.in_(person_ids),
                )
            )
        )
        await self.session.execute(
            delete(PersonAttribute).where(PersonAttribute.person_id.in_(person_ids))
        )
        await self.session.execute(
            delete(PersonMedia).where(PersonMedia.person_id.in_(person_ids))
        )
        await self.session.execute(delete(Person).where(Person.dossier_id == dossier_id))
        return await self.delete(dossier_id)
