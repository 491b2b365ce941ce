from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

DossierStatus = Literal["active", "archived", "completed"]


def _require_text(value: str) -> str:
    if value is None or not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


class DossierCreate(BaseModel):
    """Payload for creating a dossier."""

    title: str
    description: Optional[str] = None
    status: DossierStatus = "active"

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, value: str) -> str:
        return _require_text(value)


class DossierPatch(BaseModel):
    """Mutable dossier fields. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[DossierStatus] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, value: Optional[str]) -> str:
        return _require_text(value)

    @field_validator("status")
    @classmethod
    def status_not_null(cls, value: Optional[DossierStatus]) -> DossierStatus:
        if value is None:
            raise ValueError("status must not be null")
        return value


class DossierResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    status: str
    created_by: Optional[str] = None
    created_at: datetime


class PersonStats(BaseModel):
    total: int = 0
    high_confidence: int = 0


class AttributeStats(BaseModel):
    total: int = 0
    verified: int = 0


class RelationshipStats(BaseModel):
    total: int = 0
    types: int = 0
    confirmed: int = 0


class DossierStats(BaseModel):
    """Aggregate counts for one dossier."""

    dossier: DossierResponse
    persons: PersonStats = Field(default_factory=PersonStats)
    attributes: AttributeStats = Field(default_factory=AttributeStats)
    relationships: RelationshipStats = Field(default_factory=RelationshipStats)
