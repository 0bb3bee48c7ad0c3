import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, authorize_create, class_in_reach, school_filter
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.auth.scope import ensure_same_school
from schooldesk.core.models import Report, SchoolClass, Subject

from .schemas import SubjectCreate, SubjectResponse, SubjectUpdate

logger = logging.getLogger(__name__)

TEACHER_OTHER_SCHOOL = "Teacher does not belong to the same school as the class"


async def list_subjects(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[SubjectResponse]:
    target = school_filter(principal, EntityKind.SUBJECT, school_id)
    stmt = select(Subject).join(SchoolClass, SchoolClass.id == Subject.class_id).order_by(Subject.name)
    if target is not None:
        stmt = stmt.where(SchoolClass.school_id == target)
    return [SubjectResponse.model_validate(s) for s in (await db.execute(stmt)).scalars().all()]


async def list_subjects_by_class(db: AsyncSession, principal: Principal, class_id: int) -> List[SubjectResponse]:
    await class_in_reach(db, principal, EntityKind.SUBJECT, class_id)
    stmt = select(Subject).where(Subject.class_id == class_id).order_by(Subject.name)
    return [SubjectResponse.model_validate(s) for s in (await db.execute(stmt)).scalars().all()]


async def create_subject(db: AsyncSession, principal: Principal, payload: SubjectCreate) -> SubjectResponse:
    scope = await authorize_create(db, principal, EntityKind.SUBJECT, EntityKind.CLASS, payload.class_id)
    if payload.teacher_id is not None:
        await ensure_same_school(
            db, EntityKind.TEACHER, payload.teacher_id, scope.owner_school_id, TEACHER_OTHER_SCHOOL
        )

    obj = Subject(**payload.model_dump())
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Subject %s created in class %s", obj.id, obj.class_id)
    return SubjectResponse.model_validate(obj)


async def update_subject(
    db: AsyncSession, principal: Principal, subject_id: int, payload: SubjectUpdate
) -> SubjectResponse:
    scope = await authorize(db, principal, EntityKind.SUBJECT, Action.UPDATE, subject_id)
    obj = await db.get(Subject, subject_id)
    if payload.class_id is not None and payload.class_id != obj.class_id:
        scope = await authorize_create(db, principal, EntityKind.SUBJECT, EntityKind.CLASS, payload.class_id)
        obj.class_id = payload.class_id

    teacher_id = payload.teacher_id if payload.teacher_id is not None else obj.teacher_id
    if teacher_id is not None:
        # Re-checked on a class move as well
        await ensure_same_school(db, EntityKind.TEACHER, teacher_id, scope.owner_school_id, TEACHER_OTHER_SCHOOL)
    obj.teacher_id = teacher_id

    if payload.name is not None:
        obj.name = payload.name
    if payload.periods_per_week is not None:
        obj.periods_per_week = payload.periods_per_week
    await db.commit()
    await db.refresh(obj)
    return SubjectResponse.model_validate(obj)


async def delete_subject(db: AsyncSession, principal: Principal, subject_id: int) -> None:
    await authorize(db, principal, EntityKind.SUBJECT, Action.DELETE, subject_id)
    await db.execute(delete(Report).where(Report.subject_id == subject_id))
    await db.execute(delete(Subject).where(Subject.id == subject_id))
    await db.commit()
    logger.info("Subject %s deleted by user %s", subject_id, principal.user_id)
