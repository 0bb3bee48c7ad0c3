from datetime import datetime
from typing import Optional

from pydantic import Field

from schooldesk.core.schemas import ApiModel


class ClassCreate(ApiModel):
    # Required for Admin; a School principal defaults to its own school
    school_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=50)
    section: str = Field("", max_length=20)
    room: Optional[str] = Field(None, max_length=50)


class ClassUpdate(ApiModel):
    school_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    section: Optional[str] = Field(None, max_length=20)
    room: Optional[str] = Field(None, max_length=50)


class ClassResponse(ApiModel):
    id: int
    school_id: int
    name: str
    section: str
    room: Optional[str] = None
    created_at: datetime
