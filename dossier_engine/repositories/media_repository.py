import uuid
from typing import List

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.database.models import PersonMedia
from dossier_engine.repositories.base_repository import BaseRepository


class MediaRepository(BaseRepository[PersonMedia]):
    """Repository for person-to-file links."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PersonMedia)

    async def list_by_person(self, person_id: uuid.UUID) -> List[PersonMedia]:
        return await self.get_all(
            filters={"person_id": person_id},
            order_by=PersonMedia.created_at.desc(),
        )

    async def reassign_person(self, from_person_id: uuid.UUID, to_person_id: uuid.UUID) -> int:
        """Move every media link of one person to another."""
        result = await self.session.execute(
            update(PersonMedia)
            .where(PersonMedia.person_id == from_person_id)
            .values(person_id=to_person_id)
        )
        await self.session.flush()
        return result.rowcount
