"""Shared service code for the directly school-scoped bulletin kinds (notices, events, holidays)."""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, authorize_create, school_filter
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


async def list_rows(
    db: AsyncSession,
    principal: Principal,
    model,
    kind: EntityKind,
    order_by,
    school_id: Optional[int] = None,
) -> List[Any]:
    target = school_filter(principal, kind, school_id)
    stmt = select(model).order_by(order_by)
    if target is not None:
        stmt = stmt.where(model.school_id == target)
    return list((await db.execute(stmt)).scalars().all())


async def create_row(
    db: AsyncSession,
    principal: Principal,
    model,
    kind: EntityKind,
    school_id: Optional[int],
    values: Dict[str, Any],
):
    if school_id is None:
        school_id = principal.home_school_id
    if school_id is None:
        raise ValidationError("schoolId is required")
    await authorize_create(db, principal, kind, EntityKind.SCHOOL, school_id)
    obj = model(school_id=school_id, **values)
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("%s %s created in school %s", kind.value.capitalize(), obj.id, school_id)
    return obj


async def get_for_update(db: AsyncSession, principal: Principal, model, kind: EntityKind, row_id: int):
    await authorize(db, principal, kind, Action.UPDATE, row_id)
    return await db.get(model, row_id)


async def save(db: AsyncSession, obj):
    await db.commit()
    await db.refresh(obj)
    return obj


async def delete_row(db: AsyncSession, principal: Principal, model, kind: EntityKind, row_id: int) -> None:
    await authorize(db, principal, kind, Action.DELETE, row_id)
    await db.delete(await db.get(model, row_id))
    await db.commit()
    logger.info("%s %s deleted by user %s", kind.value.capitalize(), row_id, principal.user_id)
