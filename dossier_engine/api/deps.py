"""Dependencies shared by the v1 endpoints."""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from dossier_engine.core.database import get_async_session as get_session
from dossier_engine.services.dossier_service import DossierService
from dossier_engine.services.graph_service import GraphService
from dossier_engine.services.merge_service import MergeService
from dossier_engine.services.person_service import PersonService
from dossier_engine.services.relationship_service import RelationshipService
from dossier_engine.services.timeline_service import TimelineService

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_current_actor(
    x_actor_id: Annotated[Optional[str], Header()] = None,
) -> str:
    """Actor id forwarded by the authenticating gateway."""
    if not x_actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_actor_id


async def get_dossier_service(db_session: SessionDep) -> DossierService:
    return DossierService(db_session)


async def get_person_service(db_session: SessionDep) -> PersonService:
    return PersonService(db_session)


async def get_relationship_service(db_session: SessionDep) -> RelationshipService:
    return RelationshipService(db_session)


async def get_merge_service(db_session: SessionDep) -> MergeService:
    return MergeService(db_session)


async def get_graph_service(db_session: SessionDep) -> GraphService:
    return GraphService(db_session)


async def get_timeline_service(db_session: SessionDep) -> TimelineService:
    return TimelineService(db_session)
