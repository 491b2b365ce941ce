import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.database.models import PersonMergeLog
from dossier_engine.repositories.base_repository import BaseRepository


class MergeLogRepository(BaseRepository[PersonMergeLog]):
    """Insert-only access to the merge audit trail."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PersonMergeLog)

    async def list_by_dossier(self, dossier_id: uuid.UUID) -> List[PersonMergeLog]:
        """List merge log rows for a dossier, newest first."""
        return await self.get_all(
            filters={"dossier_id": dossier_id},
            order_by=PersonMergeLog.merged_at.desc(),
        )
