from decimal import Decimal

import pytest
from pydantic import ValidationError

from schooldesk.api.attendance.schemas import AttendanceCreate
from schooldesk.api.fees.schemas import FeeCreate
from schooldesk.api.fees.service import compute_balance
from schooldesk.api.holidays.schemas import END_BEFORE_START, HolidayCreate
from schooldesk.api.reports.schemas import ReportCreate
from schooldesk.api.salaries.schemas import SalaryCreate
from schooldesk.api.salaries.service import compute_net_salary
from schooldesk.core.config import settings


@pytest.mark.parametrize(
    "body",
    [
        {"studentId": 1, "teacherId": 2, "date": "2025-06-01", "status": "Present"},
        {"date": "2025-06-01", "status": "Present"},
    ],
)
def test_attendance_needs_exactly_one_subject(body) -> None:
    with pytest.raises(ValidationError) as exc:
        AttendanceCreate.model_validate(body)
    assert "Exactly one of studentId or teacherId" in str(exc.value)


def test_attendance_accepts_one_subject() -> None:
    record = AttendanceCreate.model_validate({"teacherId": 3, "date": "2025-06-01", "status": "Late"})
    assert record.teacher_id == 3
    assert record.student_id is None


@pytest.mark.parametrize(
    "payee",
    [{"teacherId": 1, "staffId": 2}, {}],
)
def test_salary_needs_exactly_one_payee(payee) -> None:
    with pytest.raises(ValidationError) as exc:
        SalaryCreate.model_validate({**payee, "amount": 1000, "month": "2025-06"})
    assert "Exactly one of teacherId or staffId" in str(exc.value)


def test_fee_submitted_above_amount_is_rejected() -> None:
    with pytest.raises(ValidationError):
        FeeCreate.model_validate({"studentId": 1, "amount": 100, "submitted": 101, "dueDate": "2025-06-01"})


def test_fee_submitted_equal_to_amount_is_accepted() -> None:
    fee = FeeCreate.model_validate({"studentId": 1, "amount": 100, "submitted": 100, "dueDate": "2025-06-01"})
    assert compute_balance(amount=fee.amount, fine=fee.fine, submitted=fee.submitted) == Decimal("0")


@pytest.mark.parametrize("field", ["amount", "tax", "pf", "bonus"])
def test_negative_salary_figures_are_rejected(field: str) -> None:
    body = {"staffId": 1, "amount": 1000, "month": "2025-06", field: -1}
    with pytest.raises(ValidationError):
        SalaryCreate.model_validate(body)


def test_amount_above_ceiling_is_rejected() -> None:
    with pytest.raises(ValidationError):
        FeeCreate.model_validate(
            {"studentId": 1, "amount": settings.max_amount + 1, "dueDate": "2025-06-01"}
        )


def test_deductions_above_gross_are_accepted() -> None:
    salary = SalaryCreate.model_validate({"staffId": 1, "amount": 100, "tax": 200, "month": "2025-06"})
    assert compute_net_salary(salary.amount, salary.tax, salary.pf, salary.bonus) == Decimal("-100")


def test_net_salary() -> None:
    salary = SalaryCreate.model_validate(
        {"teacherId": 1, "amount": "1000.00", "tax": "100", "pf": "50", "bonus": "25.50", "month": "2025-06"}
    )
    assert compute_net_salary(salary.amount, salary.tax, salary.pf, salary.bonus) == Decimal("875.50")


@pytest.mark.parametrize("month", ["2025-13", "2025-6", "June 2025", "2025-00"])
def test_salary_month_format(month: str) -> None:
    with pytest.raises(ValidationError):
        SalaryCreate.model_validate({"staffId": 1, "amount": 100, "month": month})


def test_holiday_end_before_start() -> None:
    with pytest.raises(ValidationError) as exc:
        HolidayCreate.model_validate({"name": "Summer", "startDate": "2025-06-10", "endDate": "2025-06-01"})
    assert END_BEFORE_START in str(exc.value)


def test_single_day_holiday() -> None:
    holiday = HolidayCreate.model_validate({"name": "Founders Day", "startDate": "2025-06-10", "endDate": "2025-06-10"})
    assert holiday.start_date == holiday.end_date


@pytest.mark.parametrize("marks", [-1, 100.5])
def test_marks_range(marks) -> None:
    with pytest.raises(ValidationError):
        ReportCreate.model_validate({"studentId": 1, "subjectId": 1, "marks": marks})
