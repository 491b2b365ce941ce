from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class AttributeCreate(BaseModel):
    """Payload for recording a fact about a person."""

    attribute_type: str
    attribute_value: str
    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    source_type: Optional[str] = None
    evidence_refs: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    verified: bool = False

    @field_validator("attribute_type", "attribute_value")
    @classmethod
    def not_empty(cls, value: str) -> str:
        if value is None or not str(value).strip():
            raise ValueError("attribute_type and attribute_value are required")
        return value

    @model_validator(mode="after")
    def window_is_ordered(self) -> "AttributeCreate":
        if self.valid_from and self.valid_to and self.valid_to < self.valid_from:
            raise ValueError("valid_to must not precede valid_from")
        return self


class AttributePatch(BaseModel):
    """Mutable attribute fields. Type and owning person are fixed after creation."""

    model_config = ConfigDict(extra="ignore")

    attribute_value: Optional[str] = None
    confidence_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    notes: Optional[str] = None
    verified: Optional[bool] = None

    @field_validator("attribute_value")
    @classmethod
    def value_not_empty(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("attribute_value must not be empty")
        return value

    @field_validator("confidence_score", "verified")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class AttributeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    person_id: UUID
    attribute_type: str
    attribute_value: str
    confidence_score: float
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    source_type: Optional[str] = None
    evidence_refs: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    verified: bool = False
    created_by: Optional[str] = None
    created_at: datetime
