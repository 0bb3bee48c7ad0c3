from datetime import datetime
from typing import Optional

from pydantic import model_validator

from schooldesk.core.enums import SalaryStatus
from schooldesk.core.schemas import Amount, ApiModel, Money, Month


class SalaryCreate(ApiModel):
    teacher_id: Optional[int] = None
    staff_id: Optional[int] = None
    amount: Money
    tax: Money = 0
    pf: Money = 0
    bonus: Money = 0
    month: Month
    status: SalaryStatus = SalaryStatus.NOT_CREDITED

    @model_validator(mode="after")
    def exactly_one_payee(self) -> "SalaryCreate":
        if (self.teacher_id is None) == (self.staff_id is None):
            raise ValueError("Exactly one of teacherId or staffId must be provided")
        return self


class SalaryUpdate(ApiModel):
    amount: Optional[Money] = None
    tax: Optional[Money] = None
    pf: Optional[Money] = None
    bonus: Optional[Money] = None
    month: Optional[Month] = None
    status: Optional[SalaryStatus] = None


class SalaryResponse(ApiModel):
    id: int
    teacher_id: Optional[int] = None
    staff_id: Optional[int] = None
    payee_name: Optional[str] = None
    amount: Amount
    tax: Amount
    pf: Amount
    bonus: Amount
    net_salary: Amount
    month: str
    status: SalaryStatus
    created_at: datetime
