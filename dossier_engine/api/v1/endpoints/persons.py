from typing import Annotated, Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status

from dossier_engine.api.deps import (
    get_current_actor,
    get_merge_service,
    get_person_service,
    get_timeline_service,
)
from dossier_engine.schemas.attribute import AttributeCreate
from dossier_engine.schemas.common import ApiResponse
from dossier_engine.schemas.merge import PersonMergeBody
from dossier_engine.schemas.person import MediaCreate, PersonCreate
from dossier_engine.services.merge_service import MergeService
from dossier_engine.services.person_service import PersonService
from dossier_engine.services.timeline_service import TimelineService
from dossier_engine.utils.responses import create_api_response, create_error_detail

router = APIRouter()


async def _require_person(request: Request, person_id: UUID, person_service: PersonService):
    person = await person_service.get_person(person_id)
    if person is None:
        error_detail = create_error_detail(
            title="Person Not Found",
            status=status.HTTP_404_NOT_FOUND,
            detail=f"Person with ID {person_id} not found",
            request=request,
        )
        raise HTTPException(status_code=404, detail=error_detail.model_dump(mode="json"))
    return person


# ===== Attribute and media routes (static prefixes first) =====

@router.patch("/attributes/{attribute_id}", response_model=ApiResponse, summary="Update an attribute", operation_id="update_attribute")
async def update_attribute(
    request: Request,
    attribute_id: UUID,
    updates: Dict[str, Any] = Body(...),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    attribute = await person_service.update_attribute(attribute_id, updates)
    return create_api_response(
        data={"attribute": attribute}, message="Attribute updated", request=request
    )


@router.delete("/attributes/{attribute_id}", response_model=ApiResponse, summary="Delete an attribute", operation_id="delete_attribute")
async def delete_attribute(
    request: Request,
    attribute_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    await person_service.delete_attribute(attribute_id)
    return create_api_response(data={"success": True}, message="Attribute deleted", request=request)


@router.delete("/media/{media_id}", response_model=ApiResponse, summary="Unlink a media file", operation_id="unlink_media")
async def unlink_media(
    request: Request,
    media_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    await person_service.unlink_media(media_id)
    return create_api_response(data={"success": True}, message="Media link removed", request=request)


# ===== Person routes =====

@router.get("/", response_model=ApiResponse, summary="List persons", operation_id="list_persons")
async def list_persons(
    request: Request,
    dossier_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    persons = await person_service.list_persons(
        dossier_id=dossier_id, search=search, limit=limit, offset=offset
    )
    return create_api_response(
        data={"persons": persons}, message="Persons retrieved successfully", request=request
    )


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a person",
    operation_id="create_person",
)
async def create_person(
    request: Request,
    body: PersonCreate,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    person = await person_service.create_person(**body.model_dump())
    return create_api_response(data={"person": person}, message="Person created", request=request)


@router.get("/{person_id}", response_model=ApiResponse, summary="Get a person", operation_id="get_person")
async def get_person(
    request: Request,
    person_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    person = await _require_person(request, person_id, person_service)
    return create_api_response(
        data={"person": person}, message="Person retrieved successfully", request=request
    )


@router.patch("/{person_id}", response_model=ApiResponse, summary="Update a person", operation_id="update_person")
async def update_person(
    request: Request,
    person_id: UUID,
    updates: Dict[str, Any] = Body(...),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    person = await person_service.update_person(person_id, updates)
    return create_api_response(data={"person": person}, message="Person updated", request=request)


@router.delete("/{person_id}", response_model=ApiResponse, summary="Delete a person", operation_id="delete_person")
async def delete_person(
    request: Request,
    person_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    await person_service.delete_person(person_id)
    return create_api_response(data={"success": True}, message="Person deleted", request=request)


@router.post("/{person_id}/merge", response_model=ApiResponse, summary="Merge another person into this one", operation_id="merge_person")
async def merge_person(
    request: Request,
    person_id: UUID,
    body: PersonMergeBody,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    merge_service: Annotated[MergeService, Depends(get_merge_service)] = None,
) -> ApiResponse:
    result = await merge_service.merge(
        primary_person_id=person_id,
        merged_person_id=body.merged_person_id,
        reason=body.reason,
        actor=actor,
    )
    return create_api_response(data=result, message="Persons merged", request=request)


@router.get("/{person_id}/timeline", response_model=ApiResponse, summary="Person timeline", operation_id="get_person_timeline")
async def get_person_timeline(
    request: Request,
    person_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    timeline_service: Annotated[TimelineService, Depends(get_timeline_service)] = None,
) -> ApiResponse:
    timeline = await timeline_service.build_timeline(person_id)
    return create_api_response(data=timeline, message="Timeline assembled", request=request)


@router.get("/{person_id}/attributes", response_model=ApiResponse, summary="List a person's attributes", operation_id="list_attributes")
async def list_attributes(
    request: Request,
    person_id: UUID,
    attribute_type: Optional[str] = Query(None),
    verified: Optional[bool] = Query(None),
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    await _require_person(request, person_id, person_service)
    attributes = await person_service.list_attributes(
        person_id=person_id, attribute_type=attribute_type, verified=verified
    )
    return create_api_response(
        data={"attributes": attributes}, message="Attributes retrieved successfully", request=request
    )


@router.post(
    "/{person_id}/attributes",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an attribute to a person",
    operation_id="create_attribute",
)
async def create_attribute(
    request: Request,
    person_id: UUID,
    body: AttributeCreate,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    attribute = await person_service.create_attribute(
        person_id=person_id, created_by=actor, **body.model_dump()
    )
    return create_api_response(
        data={"attribute": attribute}, message="Attribute created", request=request
    )


@router.get("/{person_id}/media", response_model=ApiResponse, summary="List a person's media links", operation_id="list_media")
async def list_media(
    request: Request,
    person_id: UUID,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    media = await person_service.list_media(person_id)
    return create_api_response(data={"media": media}, message="Media links retrieved", request=request)


@router.post(
    "/{person_id}/media",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link a stored file to a person",
    operation_id="link_media",
)
async def link_media(
    request: Request,
    person_id: UUID,
    body: MediaCreate,
    actor: Annotated[str, Depends(get_current_actor)] = None,
    person_service: Annotated[PersonService, Depends(get_person_service)] = None,
) -> ApiResponse:
    media = await person_service.link_media(
        person_id=person_id, file_ref=body.file_ref, caption=body.caption, created_by=actor
    )
    return create_api_response(data={"media": media}, message="Media linked", request=request)
