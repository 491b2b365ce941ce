from typing import Annotated, Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request

from dossier_engine.api.deps import get_current_actor, get_relationship_service
from dossier_engine.schemas.common import ApiResponse
from dossier_engine.services.relationship_service import RelationshipService
from dossier_engine.utils.responses import create_api_response

router = APIRouter()


@router.patch("/{relationship_id}", response_model=ApiResponse, summary="Update a relationship", operation_id="update_relationship")
async def update_relationship(
    request: Request,
    relationship_id: UUID,
    updates: Dict[str, Any] = Body(...),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    relationship_service: Annotated[RelationshipService, Depends(get_relationship_service)] = None,
) -> ApiResponse:
    relationship = await relationship_service.update_relationship(relationship_id, updates)
    return create_api_response(
        data={"relationship": relationship}, message="Relationship updated", request=request
    )


@router.delete("/{relationship_id}", response_model=ApiResponse, summary="Delete a relationship", operation_id="delete_relationship")
async def delete_relationship(
    request: Request,
    relationship_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    relationship_service: Annotated[RelationshipService, Depends(get_relationship_service)] = None,
) -> ApiResponse:
    await relationship_service.delete_relationship(relationship_id)
    return create_api_response(data={"success": True}, message="Relationship deleted", request=request)
