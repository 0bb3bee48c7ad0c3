import logging
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api.people import check_account_link, ensure_teacher_unassigned
from schooldesk.auth.access import authorize, authorize_create, school_filter
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.enums import Role
from schooldesk.core.exceptions import ValidationError
from schooldesk.core.models import Attendance, Salary, Subject, Teacher, Timetable

from .schemas import TeacherCreate, TeacherResponse, TeacherUpdate

logger = logging.getLogger(__name__)


async def list_teachers(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[TeacherResponse]:
    target = school_filter(principal, EntityKind.TEACHER, school_id)
    stmt = select(Teacher).order_by(Teacher.name)
    if target is not None:
        stmt = stmt.where(Teacher.school_id == target)
    return [TeacherResponse.model_validate(t) for t in (await db.execute(stmt)).scalars().all()]


async def get_teacher(db: AsyncSession, principal: Principal, teacher_id: int) -> TeacherResponse:
    await authorize(db, principal, EntityKind.TEACHER, Action.READ, teacher_id)
    return TeacherResponse.model_validate(await db.get(Teacher, teacher_id))


async def create_teacher(db: AsyncSession, principal: Principal, payload: TeacherCreate) -> TeacherResponse:
    school_id = payload.school_id if payload.school_id is not None else principal.home_school_id
    if school_id is None:
        raise ValidationError("schoolId is required")
    await authorize_create(db, principal, EntityKind.TEACHER, EntityKind.SCHOOL, school_id)
    if payload.user_id is not None:
        await check_account_link(db, Teacher, payload.user_id, Role.TEACHER, school_id)

    obj = Teacher(**payload.model_dump(exclude={"school_id"}), school_id=school_id)
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Teacher %s created in school %s", obj.id, school_id)
    return TeacherResponse.model_validate(obj)


async def update_teacher(
    db: AsyncSession, principal: Principal, teacher_id: int, payload: TeacherUpdate
) -> TeacherResponse:
    await authorize(db, principal, EntityKind.TEACHER, Action.UPDATE, teacher_id)
    obj = await db.get(Teacher, teacher_id)
    school_id = obj.school_id
    if payload.school_id is not None and payload.school_id != obj.school_id:
        await authorize_create(db, principal, EntityKind.TEACHER, EntityKind.SCHOOL, payload.school_id)
        await ensure_teacher_unassigned(db, teacher_id)
        school_id = payload.school_id
    user_id = payload.user_id if payload.user_id is not None else obj.user_id
    if user_id is not None and (user_id != obj.user_id or school_id != obj.school_id):
        # A linked account must follow the teacher into the destination school
        await check_account_link(db, Teacher, user_id, Role.TEACHER, school_id, exclude_id=teacher_id)

    obj.school_id = school_id
    obj.user_id = user_id
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"school_id", "user_id"}).items():
        setattr(obj, key, value)
    await db.commit()
    await db.refresh(obj)
    return TeacherResponse.model_validate(obj)


async def delete_teacher(db: AsyncSession, principal: Principal, teacher_id: int) -> None:
    """Remove a teacher, unassigning their subjects and timetable slots first."""
    await authorize(db, principal, EntityKind.TEACHER, Action.DELETE, teacher_id)
    await db.execute(update(Subject).where(Subject.teacher_id == teacher_id).values(teacher_id=None))
    await db.execute(update(Timetable).where(Timetable.teacher_id == teacher_id).values(teacher_id=None))
    await db.execute(delete(Attendance).where(Attendance.teacher_id == teacher_id))
    await db.execute(delete(Salary).where(Salary.teacher_id == teacher_id))
    await db.execute(delete(Teacher).where(Teacher.id == teacher_id))
    await db.commit()
    logger.info("Teacher %s deleted by user %s", teacher_id, principal.user_id)
