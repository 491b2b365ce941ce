"""Persons, their attributes and their media links."""

from datetime import date
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.core.config import settings
from dossier_engine.core.exceptions import NotFoundError, ValidationError
from dossier_engine.repositories.attribute_repository import AttributeRepository
from dossier_engine.repositories.dossier_repository import DossierRepository
from dossier_engine.repositories.media_repository import MediaRepository
from dossier_engine.repositories.person_repository import PersonRepository
from dossier_engine.schemas.attribute import AttributeCreate, AttributePatch, AttributeResponse
from dossier_engine.schemas.person import (
    MediaCreate,
    MediaResponse,
    PersonCreate,
    PersonPatch,
    PersonResponse,
)
from dossier_engine.services.base_service import BaseService
from dossier_engine.utils.logging import get_logger

LOGGER = get_logger(__name__)


class PersonService(BaseService):
    """Identity store operations for persons and the facts attached to them.

    Writes are strict (missing rows raise ``NotFoundError``), reads are
    lenient (missing rows give ``None`` or an empty list).
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.dossier_repo = DossierRepository(session)
        self.person_repo = PersonRepository(session)
        self.attribute_repo = AttributeRepository(session)
        self.media_repo = MediaRepository(session)

    # ===== Persons =====

    async def create_person(
        self,
        dossier_id: UUID,
        canonical_name: str,
        aliases: Optional[List[str]] = None,
        description: Optional[str] = None,
        confidence_score: Optional[float] = None,
    ) -> PersonResponse:
        """Create a person inside an existing dossier.

        Raises:
            ValidationError: If the name is empty, the score is out of range
                or the dossier does not exist
        """
        payload = {
            "dossier_id": dossier_id,
            "canonical_name": canonical_name,
            "aliases": aliases or [],
            "description": description,
        }
        if confidence_score is not None:
            payload["confidence_score"] = confidence_score
        person_in = self.parse(PersonCreate, payload)

        async with self.transaction():
            if await self.dossier_repo.get_by_id(person_in.dossier_id) is None:
                raise ValidationError(f"Dossier {person_in.dossier_id} does not exist")
            person = await self.person_repo.create(
                **person_in.model_dump(), merged_from=[]
            )

        LOGGER.info(
            "Person created",
            extra={"person_id": str(person.id), "dossier_id": str(person.dossier_id)},
        )
        return PersonResponse.model_validate(person)

    async def get_person(self, person_id: UUID) -> Optional[PersonResponse]:
        async with self.reading():
            person = await self.person_repo.get_by_id(person_id)
        return PersonResponse.model_validate(person) if person else None

    async def list_persons(
        self,
        dossier_id: Optional[UUID] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[PersonResponse]:
        """List persons by canonical name, optionally searching names and aliases."""
        async with self.reading():
            persons = await self.person_repo.list_persons(
                dossier_id=dossier_id,
                search=search,
                limit=limit or settings.person_page_size,
                offset=offset,
            )
        return [PersonResponse.model_validate(p) for p in persons]

    async def update_person(self, person_id: UUID, patch: Any) -> PersonResponse:
        """Patch canonical name, aliases, description or confidence score.

        Any other key in ``patch`` is ignored.

        Raises:
            NotFoundError: If the person does not exist
            ValidationError: If a patched value is invalid
        """
        values = self.parse(PersonPatch, patch).model_dump(exclude_unset=True)
        async with self.transaction():
            person = await self.person_repo.get_by_id(person_id)
            if person is None:
                raise NotFoundError(f"Person {person_id} not found")
            if values:
                person = await self.person_repo.update(person, values)
        return PersonResponse.model_validate(person)

    async def delete_person(self, person_id: UUID) -> None:
        """Delete a person with its attributes, media links and relationships.

        Raises:
            NotFoundError: If the person does not exist
        """
        async with self.transaction():
            if await self.person_repo.get_by_id(person_id) is None:
                raise NotFoundError(f"Person {person_id} not found")
            await self.person_repo.delete_with_children(person_id)
        LOGGER.info("Person deleted", extra={"person_id": str(person_id)})

    # ===== Attributes =====

    async def create_attribute(
        self,
        person_id: UUID,
        attribute_type: str,
        attribute_value: str,
        confidence_score: float = 0.5,
        valid_from: Optional[date] = None,
        valid_to: Optional[date] = None,
        source_type: Optional[str] = None,
        evidence_refs: Optional[List[str]] = None,
        notes: Optional[str] = None,
        verified: bool = False,
        created_by: Optional[str] = None,
    ) -> AttributeResponse:
        """Record a fact about a person.

        Raises:
            ValidationError: If type or value is empty or a score is out of range
            NotFoundError: If the person does not exist
        """
        attribute_in = self.parse(
            AttributeCreate,
            {
                "attribute_type": attribute_type,
                "attribute_value": attribute_value,
                "confidence_score": confidence_score,
                "valid_from": valid_from,
                "valid_to": valid_to,
                "source_type": source_type,
                "evidence_refs": evidence_refs or [],
                "notes": notes,
                "verified": verified,
            },
        )
        async with self.transaction():
            if await self.person_repo.get_by_id(person_id) is None:
                raise NotFoundError(f"Person {person_id} not found")
            attribute = await self.attribute_repo.create(
                person_id=person_id,
                created_by=created_by,
                **attribute_in.model_dump(),
            )
        return AttributeResponse.model_validate(attribute)

    async def get_attribute(self, attribute_id: UUID) -> Optional[AttributeResponse]:
        async with self.reading():
            attribute = await self.attribute_repo.get_by_id(attribute_id)
        return AttributeResponse.model_validate(attribute) if attribute else None

    async def list_attributes(
        self,
        person_id: Optional[UUID] = None,
        attribute_type: Optional[str] = None,
        verified: Optional[bool] = None,
    ) -> List[AttributeResponse]:
        async with self.reading():
            attributes = await self.attribute_repo.list_attributes(
                person_id=person_id,
                attribute_type=attribute_type,
                verified=verified,
            )
        return [AttributeResponse.model_validate(a) for a in attributes]

    async def update_attribute(self, attribute_id: UUID, patch: Any) -> AttributeResponse:
        """Patch value, confidence, validity window, notes or verified flag.

        Raises:
            NotFoundError: If the attribute does not exist
            ValidationError: If a patched value is invalid
        """
        values = self.parse(AttributePatch, patch).model_dump(exclude_unset=True)
        async with self.transaction():
            attribute = await self.attribute_repo.get_by_id(attribute_id)
            if attribute is None:
                raise NotFoundError(f"Attribute {attribute_id} not found")
            valid_from = values.get("valid_from", attribute.valid_from)
            valid_to = values.get("valid_to", attribute.valid_to)
            if valid_from and valid_to and valid_to < valid_from:
                raise ValidationError("valid_to must not precede valid_from")
            if values:
                attribute = await self.attribute_repo.update(attribute, values)
        return AttributeResponse.model_validate(attribute)

    async def delete_attribute(self, attribute_id: UUID) -> None:
        async with self.transaction():
            if not await self.attribute_repo.delete(attribute_id):
                raise NotFoundError(f"Attribute {attribute_id} not found")

    # ===== Media links =====

    async def link_media(
        self,
        person_id: UUID,
        file_ref: str,
        caption: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> MediaResponse:
        """Attach a reference to a stored file to a person."""
        media_in = self.parse(MediaCreate, {"file_ref": file_ref, "caption": caption})
        async with self.transaction():
            if await self.person_repo.get_by_id(person_id) is None:
                raise NotFoundError(f"Person {person_id} not found")
            media = await self.media_repo.create(
                person_id=person_id,
                created_by=created_by,
                **media_in.model_dump(),
            )
        return MediaResponse.model_validate(media)

    async def list_media(self, person_id: UUID) -> List[MediaResponse]:
        async with self.reading():
            media = await self.media_repo.list_by_person(person_id)
        return [MediaResponse.model_validate(m) for m in media]

    async def unlink_media(self, media_id: UUID) -> None:
        async with self.transaction():
            if not await self.media_repo.delete(media_id):
                raise NotFoundError(f"Media link {media_id} not found")
