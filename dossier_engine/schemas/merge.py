from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class MergeResponse(BaseModel):
    success: bool = True
    primary_person_id: UUID
    merged_person_id: UUID


class MergeLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    dossier_id: UUID
    primary_person_id: UUID
    merged_person_id: UUID
    reason: Optional[str] = None
    merged_by: Optional[str] = None
    merged_at: datetime


class PersonMergeBody(BaseModel):
    """Body of ``POST /persons/{id}/merge``; the path id is the primary person."""

    merged_person_id: UUID
    reason: Optional[str] = None
