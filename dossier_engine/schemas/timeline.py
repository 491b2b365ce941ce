from datetime import datetime
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


class TimelineEvent(BaseModel):
    id: str
    type: Literal["attribute", "relationship"]
    title: str
    date: datetime
    details: Dict[str, Any] = Field(default_factory=dict)


class TimelineResponse(BaseModel):
    events: List[TimelineEvent] = Field(default_factory=list)
