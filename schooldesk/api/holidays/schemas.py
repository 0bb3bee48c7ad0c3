from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from schooldesk.core.schemas import ApiModel

END_BEFORE_START = "End date cannot be before start date"


class HolidayCreate(ApiModel):
    school_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def end_not_before_start(self) -> "HolidayCreate":
        if self.end_date < self.start_date:
            raise ValueError(END_BEFORE_START)
        return self


class HolidayUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class HolidayResponse(ApiModel):
    id: int
    school_id: int
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    created_at: datetime
