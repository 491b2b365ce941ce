"""Merge engine: fold one person into another inside a single transaction."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.core.exceptions import NotFoundError, ValidationError
from dossier_engine.repositories.attribute_repository import AttributeRepository
from dossier_engine.repositories.media_repository import MediaRepository
from dossier_engine.repositories.merge_log_repository import MergeLogRepository
from dossier_engine.repositories.person_repository import PersonRepository
from dossier_engine.repositories.relationship_repository import RelationshipRepository
from dossier_engine.schemas.merge import MergeLogResponse, MergeResponse
from dossier_engine.services.base_service import BaseService
from dossier_engine.utils.logging import get_logger

LOGGER = get_logger(__name__)


class MergeService(BaseService):
    """Consolidate duplicate person records.

    A merge is all-or-nothing: the merged person's attributes, relationship
    endpoints and media links move to the primary person, an audit row is
    written and the merged person is deleted, all in one transaction. Any
    failure rolls back and is re-raised as-is.

    Merges are not idempotent. Once committed, the merged person is gone and
    a retry raises ``NotFoundError``; callers should read that as "already
    merged".
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.person_repo = PersonRepository(session)
        self.attribute_repo = AttributeRepository(session)
        self.relationship_repo = RelationshipRepository(session)
        self.media_repo = MediaRepository(session)
        self.merge_log_repo = MergeLogRepository(session)

    async def merge(
        self,
        primary_person_id: UUID,
        merged_person_id: UUID,
        reason: Optional[str] = None,
        actor: Optional[str] = None,
        dossier_id: Optional[UUID] = None,
    ) -> MergeResponse:
        """Fold ``merged_person_id`` into ``primary_person_id``.

        Args:
            primary_person_id: Person that survives
            merged_person_id: Person that is absorbed and deleted
            reason: Free-text justification stored in the merge log
            actor: Identity of the investigator performing the merge
            dossier_id: Expected dossier of both persons; derived from the
                primary person when omitted

        Returns:
            MergeResponse describing the applied merge

        Raises:
            ValidationError: If both ids are the same person
            NotFoundError: If either person is missing (including already
                merged away) or they are not in the same dossier
        """
        if primary_person_id == merged_person_id:
            raise ValidationError("cannot merge a person with itself")

        async with self.transaction():
            persons = await self.person_repo.get_many([primary_person_id, merged_person_id])
            primary = persons.get(primary_person_id)
            merged = persons.get(merged_person_id)
            if primary is None or merged is None:
                raise NotFoundError("One or both persons not found")
            if primary.dossier_id != merged.dossier_id:
                raise NotFoundError("Persons do not belong to the same dossier")
            if dossier_id is not None and primary.dossier_id != dossier_id:
                raise NotFoundError(f"Persons not found in dossier {dossier_id}")

            await self.person_repo.append_merged_from(primary, merged_person_id)
            attributes_moved = await self.attribute_repo.reassign_person(
                merged_person_id, primary_person_id
            )
            endpoints_moved = await self.relationship_repo.reassign_person(
                merged_person_id, primary_person_id
            )
            media_moved = await self.media_repo.reassign_person(
                merged_person_id, primary_person_id
            )
            await self.merge_log_repo.create(
                dossier_id=primary.dossier_id,
                primary_person_id=primary_person_id,
                merged_person_id=merged_person_id,
                reason=reason,
                merged_by=actor,
            )
            # A concurrent merge may have removed the person since the read above
            if not await self.person_repo.delete(merged_person_id):
                raise NotFoundError(f"Person {merged_person_id} not found")

        LOGGER.info(
            "Persons merged",
            extra={
                "dossier_id": str(primary.dossier_id),
                "primary_person_id": str(primary_person_id),
                "merged_person_id": str(merged_person_id),
                "attributes_moved": attributes_moved,
                "endpoints_moved": endpoints_moved,
                "media_moved": media_moved,
                "merged_by": actor,
            },
        )
        return MergeResponse(
            success=True,
            primary_person_id=primary_person_id,
            merged_person_id=merged_person_id,
        )

    async def list_merge_log(self, dossier_id: UUID) -> List[MergeLogResponse]:
        """Return the dossier's merge audit trail, newest first."""
        async with self.reading():
            rows = await self.merge_log_repo.list_by_dossier(dossier_id)
        return [MergeLogResponse.model_validate(row) for row in rows]
