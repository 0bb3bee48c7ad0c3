"""Dashboard counters. Admin sees totals across schools; everyone else only their own school."""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import school_filter
from schooldesk.auth.rbac import EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.models import Notice, SchoolClass, Student, Subject, Teacher

from .schemas import DashboardStats, GenderData, MonthlyData


def _students(target: Optional[int], *columns):
    stmt = select(*columns).select_from(Student)
    if target is not None:
        stmt = stmt.join(SchoolClass, SchoolClass.id == Student.class_id).where(SchoolClass.school_id == target)
    return stmt


def _restrict(target: Optional[int], stmt, school_column):
    if target is None:
        return stmt
    return stmt.where(school_column == target)


async def get_stats(db: AsyncSession, principal: Principal) -> DashboardStats:
    target = school_filter(principal, EntityKind.DASHBOARD)
    students = (await db.execute(_students(target, func.count(Student.id)))).scalar_one()
    teachers = (
        await db.execute(_restrict(target, select(func.count(Teacher.id)), Teacher.school_id))
    ).scalar_one()
    subjects = (
        await db.execute(
            _restrict(
                target,
                select(func.count(Subject.id)).join(SchoolClass, SchoolClass.id == Subject.class_id),
                SchoolClass.school_id,
            )
        )
    ).scalar_one()
    notices = (
        await db.execute(_restrict(target, select(func.count(Notice.id)), Notice.school_id))
    ).scalar_one()
    return DashboardStats(
        total_students=students,
        total_teachers=teachers,
        total_subjects=subjects,
        notices=notices,
    )


def _by_month(rows) -> List[int]:
    counts = [0] * 12
    for month, count in rows:
        counts[int(month) - 1] = count
    return counts


async def get_monthly_data(db: AsyncSession, principal: Principal) -> MonthlyData:
    target = school_filter(principal, EntityKind.DASHBOARD)
    year = datetime.now(timezone.utc).year

    teacher_month = extract("month", Teacher.created_at)
    teacher_stmt = _restrict(
        target,
        select(teacher_month, func.count(Teacher.id)).where(extract("year", Teacher.created_at) == year),
        Teacher.school_id,
    ).group_by(teacher_month)

    student_month = extract("month", Student.created_at)
    student_stmt = (
        _students(target, student_month, func.count(Student.id))
        .where(extract("year", Student.created_at) == year)
        .group_by(student_month)
    )

    return MonthlyData(
        teachers=_by_month((await db.execute(teacher_stmt)).all()),
        students=_by_month((await db.execute(student_stmt)).all()),
    )


async def get_gender_data(db: AsyncSession, principal: Principal) -> GenderData:
    target = school_filter(principal, EntityKind.DASHBOARD)
    gender = func.lower(Student.gender)
    stmt = _students(target, gender, func.count(Student.id)).group_by(gender)
    counts = {g: c for g, c in (await db.execute(stmt)).all() if g}
    return GenderData(boys=counts.get("male", 0), girls=counts.get("female", 0))
