"""Teacher and staff salaries. net_salary is derived here and stored."""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, authorize_create, school_filter
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.models import Salary, StaffMember, Teacher

from .schemas import SalaryCreate, SalaryResponse, SalaryUpdate

logger = logging.getLogger(__name__)


def compute_net_salary(amount: Decimal, tax: Decimal, pf: Decimal, bonus: Decimal) -> Decimal:
    return Decimal(amount) - Decimal(tax) - Decimal(pf) + Decimal(bonus)


def _salary_to_response(s: Salary, payee_name: Optional[str]) -> SalaryResponse:
    return SalaryResponse(
        id=s.id,
        teacher_id=s.teacher_id,
        staff_id=s.staff_id,
        payee_name=payee_name,
        amount=s.amount,
        tax=s.tax,
        pf=s.pf,
        bonus=s.bonus,
        net_salary=s.net_salary,
        month=s.month,
        status=s.status,
        created_at=s.created_at,
    )


def _with_payee():
    return (
        select(Salary, func.coalesce(Teacher.name, StaffMember.name))
        .outerjoin(Teacher, Teacher.id == Salary.teacher_id)
        .outerjoin(StaffMember, StaffMember.id == Salary.staff_id)
    )


def _payee_school():
    return func.coalesce(Teacher.school_id, StaffMember.school_id)


async def _load(db: AsyncSession, salary_id: int) -> SalaryResponse:
    salary, name = (await db.execute(_with_payee().where(Salary.id == salary_id))).one()
    return _salary_to_response(salary, name)


async def _rows(db: AsyncSession, stmt) -> List[SalaryResponse]:
    stmt = stmt.order_by(Salary.month.desc(), Salary.id)
    return [_salary_to_response(s, name) for s, name in (await db.execute(stmt)).all()]


async def list_salaries(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[SalaryResponse]:
    target = school_filter(principal, EntityKind.SALARY, school_id)
    stmt = _with_payee()
    if target is not None:
        stmt = stmt.where(_payee_school() == target)
    return await _rows(db, stmt)


async def list_for_teacher(db: AsyncSession, principal: Principal, teacher_id: int) -> List[SalaryResponse]:
    await authorize(db, principal, EntityKind.TEACHER_SALARY, Action.READ, teacher_id)
    return await _rows(db, _with_payee().where(Salary.teacher_id == teacher_id))


async def list_teacher_salaries_for_school(
    db: AsyncSession, principal: Principal, school_id: int
) -> List[SalaryResponse]:
    await authorize(db, principal, EntityKind.SALARY, Action.READ, school_id, via=EntityKind.SCHOOL)
    return await _rows(db, _with_payee().where(Teacher.school_id == school_id))


async def list_staff_salaries_for_school(
    db: AsyncSession, principal: Principal, school_id: int
) -> List[SalaryResponse]:
    await authorize(db, principal, EntityKind.SALARY, Action.READ, school_id, via=EntityKind.SCHOOL)
    return await _rows(db, _with_payee().where(StaffMember.school_id == school_id))


async def create_salary(db: AsyncSession, principal: Principal, payload: SalaryCreate) -> SalaryResponse:
    if payload.teacher_id is not None:
        await authorize_create(db, principal, EntityKind.SALARY, EntityKind.TEACHER, payload.teacher_id)
    else:
        await authorize_create(db, principal, EntityKind.SALARY, EntityKind.STAFF, payload.staff_id)

    salary = Salary(
        teacher_id=payload.teacher_id,
        staff_id=payload.staff_id,
        amount=payload.amount,
        tax=payload.tax,
        pf=payload.pf,
        bonus=payload.bonus,
        net_salary=compute_net_salary(payload.amount, payload.tax, payload.pf, payload.bonus),
        month=payload.month,
        status=payload.status.value,
    )
    db.add(salary)
    await db.commit()
    logger.info("Salary %s created by user %s", salary.id, principal.user_id)
    return await _load(db, salary.id)


async def update_salary(
    db: AsyncSession, principal: Principal, salary_id: int, payload: SalaryUpdate
) -> SalaryResponse:
    await authorize(db, principal, EntityKind.SALARY, Action.UPDATE, salary_id)
    salary = await db.get(Salary, salary_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    amount = Decimal(data.get("amount", salary.amount))
    tax = Decimal(data.get("tax", salary.tax))
    pf = Decimal(data.get("pf", salary.pf))
    bonus = Decimal(data.get("bonus", salary.bonus))

    salary.amount, salary.tax, salary.pf, salary.bonus = amount, tax, pf, bonus
    salary.net_salary = compute_net_salary(amount, tax, pf, bonus)
    if "month" in data:
        salary.month = data["month"]
    if "status" in data:
        salary.status = data["status"].value
    await db.commit()
    return await _load(db, salary_id)


async def delete_salary(db: AsyncSession, principal: Principal, salary_id: int) -> None:
    await authorize(db, principal, EntityKind.SALARY, Action.DELETE, salary_id)
    await db.delete(await db.get(Salary, salary_id))
    await db.commit()
    logger.info("Salary %s deleted by user %s", salary_id, principal.user_id)
