import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api.people import check_account_link
from schooldesk.auth.access import authorize, authorize_create, school_filter
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.enums import Role
from schooldesk.core.exceptions import ValidationError
from schooldesk.core.models import Salary, StaffMember

from .schemas import StaffCreate, StaffResponse, StaffUpdate

logger = logging.getLogger(__name__)


async def list_staff(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[StaffResponse]:
    target = school_filter(principal, EntityKind.STAFF, school_id)
    stmt = select(StaffMember).order_by(StaffMember.name)
    if target is not None:
        stmt = stmt.where(StaffMember.school_id == target)
    return [StaffResponse.model_validate(s) for s in (await db.execute(stmt)).scalars().all()]


async def get_staff_member(db: AsyncSession, principal: Principal, staff_id: int) -> StaffResponse:
    await authorize(db, principal, EntityKind.STAFF, Action.READ, staff_id)
    return StaffResponse.model_validate(await db.get(StaffMember, staff_id))


async def create_staff_member(db: AsyncSession, principal: Principal, payload: StaffCreate) -> StaffResponse:
    school_id = payload.school_id if payload.school_id is not None else principal.home_school_id
    if school_id is None:
        raise ValidationError("schoolId is required")
    await authorize_create(db, principal, EntityKind.STAFF, EntityKind.SCHOOL, school_id)
    if payload.user_id is not None:
        await check_account_link(db, StaffMember, payload.user_id, Role.STAFF, school_id)

    obj = StaffMember(**payload.model_dump(exclude={"school_id"}), school_id=school_id)
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Staff member %s created in school %s", obj.id, school_id)
    return StaffResponse.model_validate(obj)


async def update_staff_member(
    db: AsyncSession, principal: Principal, staff_id: int, payload: StaffUpdate
) -> StaffResponse:
    await authorize(db, principal, EntityKind.STAFF, Action.UPDATE, staff_id)
    obj = await db.get(StaffMember, staff_id)
    school_id = obj.school_id
    if payload.school_id is not None and payload.school_id != obj.school_id:
        await authorize_create(db, principal, EntityKind.STAFF, EntityKind.SCHOOL, payload.school_id)
        school_id = payload.school_id
    user_id = payload.user_id if payload.user_id is not None else obj.user_id
    if user_id is not None and (user_id != obj.user_id or school_id != obj.school_id):
        await check_account_link(db, StaffMember, user_id, Role.STAFF, school_id, exclude_id=staff_id)

    obj.school_id = school_id
    obj.user_id = user_id
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"school_id", "user_id"}).items():
        setattr(obj, key, value)
    await db.commit()
    await db.refresh(obj)
    return StaffResponse.model_validate(obj)


async def delete_staff_member(db: AsyncSession, principal: Principal, staff_id: int) -> None:
    await authorize(db, principal, EntityKind.STAFF, Action.DELETE, staff_id)
    await db.execute(delete(Salary).where(Salary.staff_id == staff_id))
    await db.execute(delete(StaffMember).where(StaffMember.id == staff_id))
    await db.commit()
    logger.info("Staff member %s deleted by user %s", staff_id, principal.user_id)
