"""Chronological timeline of a person's validity-bounded facts."""

from datetime import date, datetime, time, timezone
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.core.exceptions import NotFoundError
from dossier_engine.repositories.attribute_repository import AttributeRepository
from dossier_engine.repositories.person_repository import PersonRepository
from dossier_engine.repositories.relationship_repository import RelationshipRepository
from dossier_engine.schemas.attribute import AttributeResponse
from dossier_engine.schemas.relationship import RelationshipResponse
from dossier_engine.schemas.timeline import TimelineEvent, TimelineResponse
from dossier_engine.services.base_service import BaseService


def as_utc_datetime(value: date | datetime) -> datetime:
    """Normalise dates and naive datetimes to aware UTC datetimes."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimelineService(BaseService):
    """Merge attribute and relationship validity windows into one sequence."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.person_repo = PersonRepository(session)
        self.attribute_repo = AttributeRepository(session)
        self.relationship_repo = RelationshipRepository(session)

    async def build_timeline(self, person_id: UUID) -> TimelineResponse:
        """Return the person's dated events in ascending order.

        Attributes contribute an event when they carry ``valid_from`` or
        ``valid_to`` (dated ``valid_from``, else their creation time).
        Relationships contribute an event when they carry ``valid_from``;
        the other endpoint is named by its current canonical name. Events
        sharing a date keep their collection order.

        Raises:
            NotFoundError: If the person does not exist
        """
        async with self.reading():
            person = await self.person_repo.get_by_id(person_id)
            if person is None:
                raise NotFoundError(f"Person {person_id} not found")
            attributes = await self.attribute_repo.list_attributes(person_id=person_id)
            relationships = [
                r
                for r in await self.relationship_repo.list_relationships(person_id=person_id)
                if r.valid_from is not None
            ]
            others = await self.person_repo.get_many(
                [
                    r.person_b_id if r.person_a_id == person_id else r.person_a_id
                    for r in relationships
                ]
            )

        events: List[TimelineEvent] = []

        for attribute in attributes:
            if attribute.valid_from is None and attribute.valid_to is None:
                continue
            events.append(
                TimelineEvent(
                    id=f"attr_{attribute.id}",
                    type="attribute",
                    title=f"{attribute.attribute_type}: {attribute.attribute_value}",
                    date=as_utc_datetime(attribute.valid_from or attribute.created_at),
                    details=AttributeResponse.model_validate(attribute).model_dump(mode="json"),
                )
            )

        for relationship in relationships:
            other_id = (
                relationship.person_b_id
                if relationship.person_a_id == person_id
                else relationship.person_a_id
            )
            other = others.get(other_id)
            events.append(
                TimelineEvent(
                    id=f"rel_{relationship.id}",
                    type="relationship",
                    title=(
                        f"{relationship.relationship_type} with "
                        f"{other.canonical_name if other else 'Unknown'}"
                    ),
                    date=as_utc_datetime(relationship.valid_from),
                    details=RelationshipResponse.model_validate(relationship).model_dump(mode="json"),
                )
            )

        events.sort(key=lambda event: event.date)
        return TimelineResponse(events=events)
