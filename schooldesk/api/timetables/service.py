import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, authorize_create, school_filter
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.auth.scope import ensure_same_school
from schooldesk.core.models import SchoolClass, Timetable

from .schemas import TimetableCreate, TimetableResponse, TimetableUpdate

logger = logging.getLogger(__name__)


def _slot_to_response(t: Timetable, c: SchoolClass) -> TimetableResponse:
    return TimetableResponse(
        id=t.id,
        class_id=t.class_id,
        class_name=c.name,
        class_section=c.section,
        day=t.day,
        period=t.period,
        subject=t.subject,
        teacher_id=t.teacher_id,
        created_at=t.created_at,
    )


async def _load(db: AsyncSession, timetable_id: int) -> TimetableResponse:
    t, c = (
        await db.execute(
            select(Timetable, SchoolClass)
            .join(SchoolClass, SchoolClass.id == Timetable.class_id)
            .where(Timetable.id == timetable_id)
        )
    ).one()
    return _slot_to_response(t, c)


async def list_timetables(
    db: AsyncSession, principal: Principal, school_id: Optional[int] = None
) -> List[TimetableResponse]:
    target = school_filter(principal, EntityKind.TIMETABLE, school_id)
    stmt = select(Timetable, SchoolClass).join(SchoolClass, SchoolClass.id == Timetable.class_id)
    if target is not None:
        stmt = stmt.where(SchoolClass.school_id == target)
    stmt = stmt.order_by(SchoolClass.name, Timetable.day, Timetable.period)
    return [_slot_to_response(t, c) for t, c in (await db.execute(stmt)).all()]


async def create_timetable(db: AsyncSession, principal: Principal, payload: TimetableCreate) -> TimetableResponse:
    scope = await authorize_create(db, principal, EntityKind.TIMETABLE, EntityKind.CLASS, payload.class_id)
    if payload.teacher_id is not None:
        await ensure_same_school(
            db,
            EntityKind.TEACHER,
            payload.teacher_id,
            scope.owner_school_id,
            "Teacher does not belong to the same school as the class",
        )
    obj = Timetable(
        class_id=payload.class_id,
        day=payload.day.value,
        period=payload.period,
        subject=payload.subject,
        teacher_id=payload.teacher_id,
    )
    db.add(obj)
    await db.commit()
    return await _load(db, obj.id)


async def update_timetable(
    db: AsyncSession, principal: Principal, timetable_id: int, payload: TimetableUpdate
) -> TimetableResponse:
    scope = await authorize(db, principal, EntityKind.TIMETABLE, Action.UPDATE, timetable_id)
    obj = await db.get(Timetable, timetable_id)
    if payload.class_id is not None and payload.class_id != obj.class_id:
        scope = await authorize_create(db, principal, EntityKind.TIMETABLE, EntityKind.CLASS, payload.class_id)
        obj.class_id = payload.class_id
    if payload.teacher_id is not None:
        obj.teacher_id = payload.teacher_id
    if obj.teacher_id is not None:
        await ensure_same_school(
            db,
            EntityKind.TEACHER,
            obj.teacher_id,
            scope.owner_school_id,
            "Teacher does not belong to the same school as the class",
        )
    if payload.day is not None:
        obj.day = payload.day.value
    if payload.period is not None:
        obj.period = payload.period
    if payload.subject is not None:
        obj.subject = payload.subject
    await db.commit()
    return await _load(db, timetable_id)


async def delete_timetable(db: AsyncSession, principal: Principal, timetable_id: int) -> None:
    await authorize(db, principal, EntityKind.TIMETABLE, Action.DELETE, timetable_id)
    await db.execute(delete(Timetable).where(Timetable.id == timetable_id))
    await db.commit()
