from typing import Annotated, Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status

from dossier_engine.api.deps import (
    get_current_actor,
    get_dossier_service,
    get_graph_service,
    get_merge_service,
    get_person_service,
    get_relationship_service,
)
from dossier_engine.schemas.common import ApiResponse
from dossier_engine.schemas.dossier import DossierCreate
from dossier_engine.schemas.relationship import RelationshipCreate
from dossier_engine.services.dossier_service import DossierService
from dossier_engine.services.graph_service import GraphService
from dossier_engine.services.merge_service import MergeService
from dossier_engine.services.person_service import PersonService
from dossier_engine.services.relationship_service import RelationshipService
from dossier_engine.utils.responses import create_api_response, create_error_detail

router = APIRouter()


async def _require_dossier(
    request: Request, dossier_id: UUID, dossier_service: DossierService
):
    dossier = await dossier_service.get_dossier(dossier_id)
    if dossier is None:
        error_detail = create_error_detail(
            title="Dossier Not Found",
            status=status.HTTP_404_NOT_FOUND,
            detail=f"Dossier with ID {dossier_id} not found",
            request=request,
        )
        raise HTTPException(status_code=404, detail=error_detail.model_dump(mode="json"))
    return dossier


@router.get("/", response_model=ApiResponse, summary="List dossiers", operation_id="list_dossiers")
async def list_dossiers(
    request: Request,
    status_filter: Optional[str] = Query(None, alias="status"),
    created_by: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    dossier_service: Annotated[DossierService, Depends(get_dossier_service)] = None,
) -> ApiResponse:
    dossiers = await dossier_service.list_dossiers(
        status=status_filter, created_by=created_by, limit=limit, offset=offset
    )
    return create_api_response(
        data={"dossiers": dossiers},
        message="Dossiers retrieved successfully",
        request=request,
    )


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a dossier",
    operation_id="create_dossier",
)
async def create_dossier(
    request: Request,
    body: DossierCreate,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    dossier_service: Annotated[DossierService, Depends(get_dossier_service)] = None,
) -> ApiResponse:
    dossier = await dossier_service.create_dossier(
        title=body.title,
        description=body.description,
        status=body.status,
        created_by=actor,
    )
    return create_api_response(
        data={"dossier": dossier}, message="Dossier created", request=request
    )


@router.get("/{dossier_id}", response_model=ApiResponse, summary="Get a dossier", operation_id="get_dossier")
async def get_dossier(
    request: Request,
    dossier_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    dossier_service: Annotated[DossierService, Depends(get_dossier_service)] = None,
) -> ApiResponse:
    dossier = await _require_dossier(request, dossier_id, dossier_service)
    return create_api_response(
        data={"dossier": dossier}, message="Dossier retrieved successfully", request=request
    )


@router.patch("/{dossier_id}", response_model=ApiResponse, summary="Update a dossier", operation_id="update_dossier")
async def update_dossier(
    request: Request,
    dossier_id: UUID,
    updates: Dict[str, Any] = Body(...),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    dossier_service: Annotated[DossierService, Depends(get_dossier_service)] = None,
) -> ApiResponse:
    dossier = await dossier_service.update_dossier(dossier_id, updates)
    return create_api_response(
        data={"dossier": dossier}, message="Dossier updated", request=request
    )


@router.delete("/{dossier_id}", response_model=ApiResponse, summary="Delete a dossier", operation_id="delete_dossier")
async def delete_dossier(
    request: Request,
    dossier_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    dossier_service: Annotated[DossierService, Depends(get_dossier_service)] = None,
) -> ApiResponse:
    await dossier_service.delete_dossier(dossier_id)
    return create_api_response(
        data={"success": True}, message="Dossier deleted", request=request
    )


@router.get("/{dossier_id}/stats", response_model=ApiResponse, summary="Dossier statistics", operation_id="get_dossier_stats")
async def get_dossier_stats(
    request: Request,
    dossier_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    dossier_service: Annotated[DossierService, Depends(get_dossier_service)] = None,
) -> ApiResponse:
    stats = await dossier_service.get_dossier_stats(dossier_id)
    return create_api_response(data=stats, message="Dossier statistics retrieved", request=request)


@router.get("/{dossier_id}/persons", response_model=ApiResponse, summary="List persons in a dossier", operation_id="list_dossier_persons")
async def list_dossier_persons(
    request: Request,
    dossier_id: UUID,
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    dossier_service: Annotated[DossierService, Depends(get_dossier_service)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    await _require_dossier(request, dossier_id, dossier_service)
    persons = await person_service.list_persons(
        dossier_id=dossier_id, search=search, limit=limit, offset=offset
    )
    return create_api_response(
        data={"persons": persons}, message="Persons retrieved successfully", request=request
    )


@router.get("/{dossier_id}/relationships", response_model=ApiResponse, summary="List relationships in a dossier", operation_id="list_dossier_relationships")
async def list_dossier_relationships(
    request: Request,
    dossier_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    dossier_service: Annotated[DossierService, Depends(get_dossier_service)] = None,
    relationship_service: Annotated[RelationshipService, Depends(get_relationship_service)] = None,
) -> ApiResponse:
    await _require_dossier(request, dossier_id, dossier_service)
    relationships = await relationship_service.list_relationships(dossier_id=dossier_id)
    return create_api_response(
        data={"relationships": relationships},
        message="Relationships retrieved successfully",
        request=request,
    )


@router.post(
    "/{dossier_id}/relationships",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a relationship",
    operation_id="create_relationship",
)
async def create_relationship(
    request: Request,
    dossier_id: UUID,
    body: RelationshipCreate,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    relationship_service: Annotated[RelationshipService, Depends(get_relationship_service)] = None,
) -> ApiResponse:
    relationship = await relationship_service.create_relationship(
        dossier_id=dossier_id, **body.model_dump()
    )
    return create_api_response(
        data={"relationship": relationship}, message="Relationship created", request=request
    )


@router.get(
    "/{dossier_id}/relationship-graph",
    response_model=ApiResponse,
    summary="Relationship graph for visualisation",
    operation_id="get_relationship_graph",
)
async def get_relationship_graph(
    request: Request,
    dossier_id: UUID,
    focus: Optional[UUID] = Query(None),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    graph_service: Annotated[GraphService, Depends(get_graph_service)] = None,
) -> ApiResponse:
    graph = await graph_service.build_graph(dossier_id, focus=focus)
    return create_api_response(data=graph, message="Relationship graph assembled", request=request)


@router.get("/{dossier_id}/merge-log", response_model=ApiResponse, summary="Merge audit trail", operation_id="list_merge_log")
async def list_merge_log(
    request: Request,
    dossier_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    merge_service: Annotated[MergeService, Depends(get_merge_service)] = None,
) -> ApiResponse:
    entries = await merge_service.list_merge_log(dossier_id)
    return create_api_response(
        data={"merges": entries}, message="Merge log retrieved", request=request
    )
