"""Dossier lifecycle and statistics."""

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.core.config import settings
from dossier_engine.core.exceptions import NotFoundError
from dossier_engine.repositories.attribute_repository import AttributeRepository
from dossier_engine.repositories.dossier_repository import DossierRepository
from dossier_engine.repositories.person_repository import PersonRepository
from dossier_engine.repositories.relationship_repository import RelationshipRepository
from dossier_engine.schemas.dossier import (
    AttributeStats,
    DossierCreate,
    DossierPatch,
    DossierResponse,
    DossierStats,
    PersonStats,
    RelationshipStats,
)
from dossier_engine.services.base_service import BaseService
from dossier_engine.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DossierService(BaseService):
    """Create, read, update and delete dossiers."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.dossier_repo = DossierRepository(session)
        self.person_repo = PersonRepository(session)
        self.attribute_repo = AttributeRepository(session)
        self.relationship_repo = RelationshipRepository(session)

    async def create_dossier(
        self,
        title: str,
        description: Optional[str] = None,
        status: str = "active",
        created_by: Optional[str] = None,
    ) -> DossierResponse:
        """Create a dossier owned by ``created_by``.

        Raises:
            ValidationError: If the title is empty or the status unknown
        """
        payload = self.parse(
            DossierCreate,
            {"title": title, "description": description, "status": status},
        )
        async with self.transaction():
            dossier = await self.dossier_repo.create(
                **payload.model_dump(), created_by=created_by
            )
        LOGGER.info(
            "Dossier created",
            extra={"dossier_id": str(dossier.id), "created_by": created_by},
        )
        return DossierResponse.model_validate(dossier)

    async def get_dossier(self, dossier_id: UUID) -> Optional[DossierResponse]:
        async with self.reading():
            dossier = await self.dossier_repo.get_by_id(dossier_id)
        return DossierResponse.model_validate(dossier) if dossier else None

    async def list_dossiers(
        self,
        status: Optional[str] = None,
        created_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[DossierResponse]:
        async with self.reading():
            dossiers = await self.dossier_repo.list_dossiers(
                status=status,
                created_by=created_by,
                limit=limit or settings.dossier_page_size,
                offset=offset,
            )
        return [DossierResponse.model_validate(d) for d in dossiers]

    async def update_dossier(self, dossier_id: UUID, patch: Any) -> DossierResponse:
        """Apply a partial update; only title, description and status change.

        Raises:
            NotFoundError: If the dossier does not exist
            ValidationError: If a patched value is invalid
        """
        values = self.parse(DossierPatch, patch).model_dump(exclude_unset=True)
        async with self.transaction():
            dossier = await self.dossier_repo.get_by_id(dossier_id)
            if dossier is None:
                raise NotFoundError(f"Dossier {dossier_id} not found")
            if values:
                dossier = await self.dossier_repo.update(dossier, values)
        return DossierResponse.model_validate(dossier)

    async def delete_dossier(self, dossier_id: UUID) -> None:
        """Delete a dossier with its persons, attributes, edges and merge log.

        Raises:
            NotFoundError: If the dossier does not exist
        """
        async with self.transaction():
            if await self.dossier_repo.get_by_id(dossier_id) is None:
                raise NotFoundError(f"Dossier {dossier_id} not found")
            await self.dossier_repo.delete_cascade(dossier_id)
        LOGGER.warning("Dossier deleted", extra={"dossier_id": str(dossier_id)})

    async def get_dossier_stats(self, dossier_id: UUID) -> DossierStats:
        """Count persons, attributes and relationships of a dossier.

        Raises:
            NotFoundError: If the dossier does not exist
        """
        threshold = settings.graph.high_confidence_threshold
        async with self.reading():
            dossier = await self.dossier_repo.get_by_id(dossier_id)
            if dossier is None:
                raise NotFoundError(f"Dossier {dossier_id} not found")
            persons = await self.person_repo.get_stats(dossier_id, threshold)
            attributes = await self.attribute_repo.get_stats(dossier_id)
            relationships = await self.relationship_repo.get_stats(dossier_id, threshold)

        return DossierStats(
            dossier=DossierResponse.model_validate(dossier),
            persons=PersonStats(**persons),
            attributes=AttributeStats(**attributes),
            relationships=RelationshipStats(**relationships),
        )
