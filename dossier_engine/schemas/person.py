from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PersonCreate(BaseModel):
    """Payload for creating a person inside a dossier."""

    dossier_id: UUID
    canonical_name: str
    aliases: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)

    @field_validator("canonical_name")
    @classmethod
    def name_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("canonical_name is required")
        return value.strip()


class PersonPatch(BaseModel):
    """Mutable person fields. Ids, dossier and merge history are not patchable."""

    model_config = ConfigDict(extra="ignore")

    canonical_name: Optional[str] = None
    aliases: Optional[List[str]] = None
    description: Optional[str] = None
    confidence_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    # Omitted keys keep their value; an explicit null is rejected
    @field_validator("canonical_name")
    @classmethod
    def name_not_empty(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("canonical_name must not be empty")
        return value.strip()

    @field_validator("aliases", "confidence_score")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class PersonResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    dossier_id: UUID
    canonical_name: str
    aliases: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    confidence_score: float
    merged_from: List[UUID] = Field(default_factory=list)


class MediaCreate(BaseModel):
    file_ref: str
    caption: Optional[str] = None

    @field_validator("file_ref")
    @classmethod
    def ref_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("file_ref is required")
        return value


class MediaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    person_id: UUID
    file_ref: str
    caption: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
