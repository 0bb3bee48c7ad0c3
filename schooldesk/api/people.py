"""Helpers shared by the student, teacher and staff services."""
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.models import User
from schooldesk.core.enums import Role
from schooldesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from schooldesk.core.models import Student, Subject, Teacher, Timetable


async def check_account_link(
    db: AsyncSession,
    model,
    user_id: int,
    role: Role,
    school_id: int,
    exclude_id: Optional[int] = None,
) -> None:
    """A domain row may only be paired with an unused account of the matching role in the same school."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.role != role.value:
        raise ValidationError(f"Linked account must have role {role.value}")
    if user.school_id != school_id:
        raise ValidationError("Linked account belongs to another school")
    stmt = select(model.id).where(model.user_id == user_id)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError("Account is already linked")


async def ensure_teacher_unassigned(db: AsyncSession, teacher_id: int) -> None:
    """A teacher moving school must not keep subjects or timetable slots of the old one."""
    for model, label in ((Subject, "subjects"), (Timetable, "timetable slots")):
        count = (
            await db.execute(select(func.count()).select_from(model).where(model.teacher_id == teacher_id))
        ).scalar_one()
        if count:
            raise ValidationError(f"Cannot move teacher to another school: still assigned to {label}")


async def ensure_class_movable(db: AsyncSession, class_id: int, school_id: int) -> None:
    """Every teacher assigned inside a class, and every student account, must belong to school_id."""
    for model, label in ((Subject, "subjects"), (Timetable, "timetable slots")):
        count = (
            await db.execute(
                select(func.count())
                .select_from(model)
                .join(Teacher, Teacher.id == model.teacher_id)
                .where(model.class_id == class_id, Teacher.school_id != school_id)
            )
        ).scalar_one()
        if count:
            raise ValidationError(f"Cannot move class to another school: its {label} have teachers of the old school")
    linked = (
        await db.execute(
            select(func.count())
            .select_from(Student)
            .join(User, User.id == Student.user_id)
            .where(Student.class_id == class_id, User.school_id != school_id)
        )
    ).scalar_one()
    if linked:
        raise ValidationError("Cannot move class to another school: its students have accounts of the old school")
