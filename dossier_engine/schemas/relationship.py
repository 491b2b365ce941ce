from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RelationshipCreate(BaseModel):
    """Payload for linking two persons of one dossier."""

    person_a_id: UUID
    person_b_id: UUID
    relationship_type: str
    description: Optional[str] = None
    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)
    evidence_refs: List[str] = Field(default_factory=list)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None

    @field_validator("relationship_type")
    @classmethod
    def type_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("relationship_type is required")
        return value.strip()

    @model_validator(mode="after")
    def window_is_ordered(self) -> "RelationshipCreate":
        if self.valid_from and self.valid_to and self.valid_to < self.valid_from:
            raise ValueError("valid_to must not precede valid_from")
        return self


class RelationshipPatch(BaseModel):
    """Mutable relationship fields. Endpoints and dossier are fixed."""

    model_config = ConfigDict(extra="ignore")

    relationship_type: Optional[str] = None
    description: Optional[str] = None
    confidence_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None

    @field_validator("relationship_type")
    @classmethod
    def type_not_empty(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("relationship_type must not be empty")
        return value.strip()

    @field_validator("confidence_score")
    @classmethod
    def score_not_null(cls, value: Optional[float]) -> float:
        if value is None:
            raise ValueError("confidence_score must not be null")
        return value


class RelationshipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    dossier_id: UUID
    person_a_id: UUID
    person_b_id: UUID
    relationship_type: str
    description: Optional[str] = None
    confidence_score: float
    evidence_refs: List[str] = Field(default_factory=list)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    created_at: datetime
