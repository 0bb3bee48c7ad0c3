"""Student fees. balance is derived here, on the only write path, and stored."""
import logging
from decimal import Decimal
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, authorize_create
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ValidationError
from schooldesk.core.models import Fee, SchoolClass, Student

from .schemas import FeeCreate, FeeResponse, FeeUpdate

logger = logging.getLogger(__name__)


def compute_balance(amount: Decimal, fine: Decimal, submitted: Decimal) -> Decimal:
    return Decimal(amount) + Decimal(fine) - Decimal(submitted)


def _fee_to_response(f: Fee, student_name: str) -> FeeResponse:
    return FeeResponse(
        id=f.id,
        student_id=f.student_id,
        student_name=student_name,
        amount=f.amount,
        submitted=f.submitted,
        fine=f.fine,
        balance=f.balance,
        due_date=f.due_date,
        status=f.status,
        created_at=f.created_at,
    )


def _with_student_name():
    return select(Fee, Student.name).join(Student, Student.id == Fee.student_id)


async def _load(db: AsyncSession, fee_id: int) -> FeeResponse:
    fee, name = (await db.execute(_with_student_name().where(Fee.id == fee_id))).one()
    return _fee_to_response(fee, name)


async def list_for_student(db: AsyncSession, principal: Principal, student_id: int) -> List[FeeResponse]:
    await authorize(db, principal, EntityKind.STUDENT_FEE, Action.READ, student_id)
    stmt = _with_student_name().where(Fee.student_id == student_id).order_by(Fee.due_date)
    return [_fee_to_response(f, name) for f, name in (await db.execute(stmt)).all()]


async def list_for_school(db: AsyncSession, principal: Principal, school_id: int) -> List[FeeResponse]:
    await authorize(db, principal, EntityKind.FEE, Action.READ, school_id, via=EntityKind.SCHOOL)
    stmt = (
        _with_student_name()
        .join(SchoolClass, SchoolClass.id == Student.class_id)
        .where(SchoolClass.school_id == school_id)
        .order_by(Fee.due_date, Fee.id)
    )
    return [_fee_to_response(f, name) for f, name in (await db.execute(stmt)).all()]


async def create_fee(db: AsyncSession, principal: Principal, payload: FeeCreate) -> FeeResponse:
    # Student lookup and insert share the session transaction
    await authorize_create(db, principal, EntityKind.FEE, EntityKind.STUDENT, payload.student_id)
    fee = Fee(
        student_id=payload.student_id,
        amount=payload.amount,
        submitted=payload.submitted,
        fine=payload.fine,
        balance=compute_balance(payload.amount, payload.fine, payload.submitted),
        due_date=payload.due_date,
        status=payload.status.value,
    )
    db.add(fee)
    await db.commit()
    logger.info("Fee %s created for student %s", fee.id, fee.student_id)
    return await _load(db, fee.id)


async def update_fee(db: AsyncSession, principal: Principal, fee_id: int, payload: FeeUpdate) -> FeeResponse:
    await authorize(db, principal, EntityKind.FEE, Action.UPDATE, fee_id)
    fee = await db.get(Fee, fee_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    amount = data.get("amount", fee.amount)
    submitted = data.get("submitted", fee.submitted)
    fine = data.get("fine", fee.fine)
    if Decimal(submitted) > Decimal(amount):
        raise ValidationError("Submitted amount cannot exceed the fee amount")

    fee.amount = amount
    fee.submitted = submitted
    fee.fine = fine
    fee.balance = compute_balance(amount, fine, submitted)
    if "due_date" in data:
        fee.due_date = data["due_date"]
    if "status" in data:
        fee.status = data["status"].value
    await db.commit()
    return await _load(db, fee_id)


async def delete_fee(db: AsyncSession, principal: Principal, fee_id: int) -> None:
    await authorize(db, principal, EntityKind.FEE, Action.DELETE, fee_id)
    await db.delete(await db.get(Fee, fee_id))
    await db.commit()
    logger.info("Fee %s deleted by user %s", fee_id, principal.user_id)
