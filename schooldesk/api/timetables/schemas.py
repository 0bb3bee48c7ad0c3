from datetime import datetime
from typing import Optional

from pydantic import Field

from schooldesk.core.enums import Weekday
from schooldesk.core.schemas import ApiModel


class TimetableCreate(ApiModel):
    class_id: int
    day: Weekday
    period: str = Field(..., min_length=1, max_length=20)
    subject: str = Field(..., min_length=1, max_length=100)
    teacher_id: Optional[int] = None


class TimetableUpdate(ApiModel):
    class_id: Optional[int] = None
    day: Optional[Weekday] = None
    period: Optional[str] = Field(None, min_length=1, max_length=20)
    subject: Optional[str] = Field(None, min_length=1, max_length=100)
    teacher_id: Optional[int] = None


class TimetableResponse(ApiModel):
    id: int
    class_id: int
    class_name: Optional[str] = None
    class_section: Optional[str] = None
    day: str
    period: str
    subject: str
    teacher_id: Optional[int] = None
    created_at: datetime
