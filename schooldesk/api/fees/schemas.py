from datetime import date, datetime
from typing import Optional

from pydantic import model_validator

from schooldesk.core.enums import FeeStatus
from schooldesk.core.schemas import Amount, ApiModel, Money


class FeeCreate(ApiModel):
    student_id: int
    amount: Money
    submitted: Money = 0
    fine: Money = 0
    due_date: date
    status: FeeStatus = FeeStatus.PENDING

    @model_validator(mode="after")
    def submitted_within_amount(self) -> "FeeCreate":
        if self.submitted > self.amount:
            raise ValueError("Submitted amount cannot exceed the fee amount")
        return self


class FeeUpdate(ApiModel):
    amount: Optional[Money] = None
    submitted: Optional[Money] = None
    fine: Optional[Money] = None
    due_date: Optional[date] = None
    status: Optional[FeeStatus] = None


class FeeResponse(ApiModel):
    id: int
    student_id: int
    student_name: Optional[str] = None
    amount: Amount
    submitted: Amount
    fine: Amount
    balance: Amount
    due_date: date
    status: FeeStatus
    created_at: datetime
