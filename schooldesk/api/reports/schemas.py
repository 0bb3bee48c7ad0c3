from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import Field

from schooldesk.core.schemas import Amount, ApiModel

Marks = Annotated[Decimal, Field(ge=0, le=100, max_digits=5, decimal_places=2)]


class ReportCreate(ApiModel):
    student_id: int
    subject_id: int
    marks: Marks
    remarks: Optional[str] = Field(None, max_length=500)


class ReportUpdate(ApiModel):
    subject_id: Optional[int] = None
    marks: Optional[Marks] = None
    remarks: Optional[str] = Field(None, max_length=500)


class ReportResponse(ApiModel):
    id: int
    student_id: int
    subject_id: int
    subject_name: Optional[str] = None
    marks: Amount
    remarks: Optional[str] = None
    created_at: datetime
