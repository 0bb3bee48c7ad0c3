import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, check, school_filter
from schooldesk.auth.rbac import Action, EntityKind, Scope
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ValidationError
from schooldesk.core.models import School, SchoolClass, StaffMember, Teacher

from .schemas import SchoolCreate, SchoolName, SchoolResponse, SchoolUpdate

logger = logging.getLogger(__name__)


async def list_schools(db: AsyncSession, principal: Principal) -> List[SchoolResponse]:
    """Admin sees every school; a School principal sees only its own."""
    target = school_filter(principal, EntityKind.SCHOOL)
    stmt = select(School).order_by(School.id)
    if target is not None:
        stmt = stmt.where(School.id == target)
    rows = (await db.execute(stmt)).scalars().all()
    return [SchoolResponse.model_validate(s) for s in rows]


async def list_school_names(db: AsyncSession, principal: Principal) -> List[SchoolName]:
    # Admin-only: writes on schools are granted to no other role
    check(principal, EntityKind.SCHOOL, Action.CREATE, Scope(owner_school_id=None))
    rows = (await db.execute(select(School.id, School.name).order_by(School.name))).all()
    return [SchoolName(id=r.id, name=r.name) for r in rows]


async def get_school(db: AsyncSession, principal: Principal, school_id: int) -> SchoolResponse:
    await authorize(db, principal, EntityKind.SCHOOL, Action.READ, school_id)
    return SchoolResponse.model_validate(await db.get(School, school_id))


async def create_school(db: AsyncSession, principal: Principal, payload: SchoolCreate) -> SchoolResponse:
    check(principal, EntityKind.SCHOOL, Action.CREATE, Scope(owner_school_id=None))
    school = School(**payload.model_dump())
    db.add(school)
    await db.commit()
    await db.refresh(school)
    logger.info("School %s created by user %s", school.id, principal.user_id)
    return SchoolResponse.model_validate(school)


async def update_school(db: AsyncSession, principal: Principal, school_id: int, payload: SchoolUpdate) -> SchoolResponse:
    await authorize(db, principal, EntityKind.SCHOOL, Action.UPDATE, school_id)
    school = await db.get(School, school_id)
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(school, key, value)
    await db.commit()
    await db.refresh(school)
    return SchoolResponse.model_validate(school)


async def delete_school(db: AsyncSession, principal: Principal, school_id: int) -> None:
    await authorize(db, principal, EntityKind.SCHOOL, Action.DELETE, school_id)
    for model, label in ((SchoolClass, "classes"), (Teacher, "teachers"), (StaffMember, "staff")):
        count = (await db.execute(select(func.count()).select_from(model).where(model.school_id == school_id))).scalar_one()
        if count:
            raise ValidationError(f"Cannot delete school: it still has {label}")
    await db.delete(await db.get(School, school_id))
    await db.commit()
    logger.info("School %s deleted by user %s", school_id, principal.user_id)
