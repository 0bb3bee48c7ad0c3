import datetime
from typing import Optional

from pydantic import Field

from schooldesk.core.schemas import ApiModel


class NoticeCreate(ApiModel):
    school_id: Optional[int] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    date: datetime.date


class NoticeUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    date: Optional[datetime.date] = None


class NoticeResponse(ApiModel):
    id: int
    school_id: int
    title: str
    description: str
    date: datetime.date
    created_at: datetime.datetime
