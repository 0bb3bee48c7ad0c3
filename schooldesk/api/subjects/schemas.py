from datetime import datetime
from typing import Optional

from pydantic import Field

from schooldesk.core.schemas import ApiModel


class SubjectCreate(ApiModel):
    class_id: int
    name: str = Field(..., min_length=1, max_length=100)
    teacher_id: Optional[int] = None
    periods_per_week: Optional[int] = Field(None, ge=0, le=60)


class SubjectUpdate(ApiModel):
    class_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    teacher_id: Optional[int] = None
    periods_per_week: Optional[int] = Field(None, ge=0, le=60)


class SubjectResponse(ApiModel):
    id: int
    class_id: int
    name: str
    teacher_id: Optional[int] = None
    periods_per_week: Optional[int] = None
    created_at: datetime
