import datetime
from typing import Optional

from pydantic import Field

from schooldesk.core.schemas import ApiModel


class EventCreate(ApiModel):
    school_id: Optional[int] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    date: datetime.date


class EventUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    date: Optional[datetime.date] = None


class EventResponse(ApiModel):
    id: int
    school_id: int
    title: str
    description: Optional[str] = None
    date: datetime.date
    created_at: datetime.datetime
