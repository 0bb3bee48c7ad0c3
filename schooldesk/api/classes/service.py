import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api.people import ensure_class_movable
from schooldesk.auth.access import authorize, authorize_create, school_filter
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ConflictError, ValidationError
from schooldesk.core.models import SchoolClass, Student, Subject, Timetable

from .schemas import ClassCreate, ClassResponse, ClassUpdate

logger = logging.getLogger(__name__)


async def _ensure_unique_name(
    db: AsyncSession,
    school_id: int,
    name: str,
    section: str,
    exclude_id: Optional[int] = None,
) -> None:
    stmt = select(SchoolClass.id).where(
        SchoolClass.school_id == school_id,
        SchoolClass.name == name,
        SchoolClass.section == section,
    )
    if exclude_id is not None:
        stmt = stmt.where(SchoolClass.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError("A class with this name and section already exists in this school")


async def list_classes(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[ClassResponse]:
    target = school_filter(principal, EntityKind.CLASS, school_id)
    stmt = select(SchoolClass).order_by(SchoolClass.name, SchoolClass.section)
    if target is not None:
        stmt = stmt.where(SchoolClass.school_id == target)
    rows = (await db.execute(stmt)).scalars().all()
    return [ClassResponse.model_validate(c) for c in rows]


async def get_class(db: AsyncSession, principal: Principal, class_id: int) -> ClassResponse:
    await authorize(db, principal, EntityKind.CLASS, Action.READ, class_id)
    return ClassResponse.model_validate(await db.get(SchoolClass, class_id))


async def create_class(db: AsyncSession, principal: Principal, payload: ClassCreate) -> ClassResponse:
    school_id = payload.school_id if payload.school_id is not None else principal.home_school_id
    if school_id is None:
        raise ValidationError("schoolId is required")
    await authorize_create(db, principal, EntityKind.CLASS, EntityKind.SCHOOL, school_id)

    name = payload.name.strip()
    section = payload.section.strip()
    await _ensure_unique_name(db, school_id, name, section)
    obj = SchoolClass(school_id=school_id, name=name, section=section, room=payload.room)
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Class %s created in school %s", obj.id, school_id)
    return ClassResponse.model_validate(obj)


async def update_class(db: AsyncSession, principal: Principal, class_id: int, payload: ClassUpdate) -> ClassResponse:
    await authorize(db, principal, EntityKind.CLASS, Action.UPDATE, class_id)
    obj = await db.get(SchoolClass, class_id)
    school_id = obj.school_id
    if payload.school_id is not None and payload.school_id != obj.school_id:
        await authorize_create(db, principal, EntityKind.CLASS, EntityKind.SCHOOL, payload.school_id)
        await ensure_class_movable(db, class_id, payload.school_id)
        school_id = payload.school_id

    name = payload.name.strip() if payload.name is not None else obj.name
    section = payload.section.strip() if payload.section is not None else obj.section
    await _ensure_unique_name(db, school_id, name, section, exclude_id=class_id)

    obj.school_id = school_id
    obj.name = name
    obj.section = section
    if payload.room is not None:
        obj.room = payload.room
    await db.commit()
    await db.refresh(obj)
    return ClassResponse.model_validate(obj)


async def delete_class(db: AsyncSession, principal: Principal, class_id: int) -> None:
    await authorize(db, principal, EntityKind.CLASS, Action.DELETE, class_id)
    for model, label in ((Student, "students"), (Subject, "subjects")):
        count = (await db.execute(select(func.count()).select_from(model).where(model.class_id == class_id))).scalar_one()
        if count:
            raise ValidationError(f"Cannot delete class: it still has {label}")
    await db.execute(delete(Timetable).where(Timetable.class_id == class_id))
    await db.execute(delete(SchoolClass).where(SchoolClass.id == class_id))
    await db.commit()
    logger.info("Class %s deleted by user %s", class_id, principal.user_id)
