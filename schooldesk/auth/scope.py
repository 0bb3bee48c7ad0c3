"""
Resolve where an entity lives.

Each resolver walks the ownership chain of one entity kind (at most two hops,
e.g. fee -> student -> class -> school) and returns a Scope. A missing row or
a broken link anywhere in the chain raises NotFoundError, so callers always
learn about a dangling reference before any policy check runs.
"""
from typing import Awaitable, Callable, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.models import User
from schooldesk.auth.rbac import EntityKind, Scope
from schooldesk.core.exceptions import NotFoundError, ValidationError
from schooldesk.core.models import (
    Attendance,
    Event,
    Fee,
    Holiday,
    Notice,
    Report,
    Salary,
    School,
    SchoolClass,
    StaffMember,
    Student,
    Subject,
    Teacher,
    Timetable,
)

Resolver = Callable[[AsyncSession, int], Awaitable[Scope]]


async def _school_scope(db: AsyncSession, school_id: int) -> Scope:
    found = (await db.execute(select(School.id).where(School.id == school_id))).scalar_one_or_none()
    if found is None:
        raise NotFoundError("School not found")
    return Scope(owner_school_id=found)


async def _user_scope(db: AsyncSession, user_id: int) -> Scope:
    row = (
        await db.execute(select(User.id, User.school_id).where(User.id == user_id))
    ).one_or_none()
    if row is None:
        raise NotFoundError("User not found")
    return Scope(owner_school_id=row.school_id, owner_user_id=row.id)


async def _class_scope(db: AsyncSession, class_id: int) -> Scope:
    row = (
        await db.execute(
            select(SchoolClass.id, School.id.label("school_id"))
            .outerjoin(School, School.id == SchoolClass.school_id)
            .where(SchoolClass.id == class_id)
        )
    ).one_or_none()
    if row is None:
        raise NotFoundError("Class not found")
    if row.school_id is None:
        raise NotFoundError("School not found")
    return Scope(owner_school_id=row.school_id)


async def _student_scope(db: AsyncSession, student_id: int) -> Scope:
    row = (
        await db.execute(
            select(Student.id, Student.user_id, SchoolClass.school_id)
            .outerjoin(SchoolClass, SchoolClass.id == Student.class_id)
            .where(Student.id == student_id)
        )
    ).one_or_none()
    if row is None:
        raise NotFoundError("Student not found")
    if row.school_id is None:
        raise NotFoundError("Class not found")
    return Scope(owner_school_id=row.school_id, owner_user_id=row.user_id)


async def _teacher_scope(db: AsyncSession, teacher_id: int) -> Scope:
    row = (
        await db.execute(select(Teacher.school_id, Teacher.user_id).where(Teacher.id == teacher_id))
    ).one_or_none()
    if row is None:
        raise NotFoundError("Teacher not found")
    return Scope(owner_school_id=row.school_id, owner_user_id=row.user_id)


async def _staff_scope(db: AsyncSession, staff_id: int) -> Scope:
    row = (
        await db.execute(select(StaffMember.school_id, StaffMember.user_id).where(StaffMember.id == staff_id))
    ).one_or_none()
    if row is None:
        raise NotFoundError("Staff member not found")
    return Scope(owner_school_id=row.school_id, owner_user_id=row.user_id)


async def _via_class(db: AsyncSession, model, entity_id: int, label: str) -> Scope:
    class_id = (await db.execute(select(model.class_id).where(model.id == entity_id))).scalar_one_or_none()
    if class_id is None:
        raise NotFoundError(f"{label} not found")
    return await _class_scope(db, class_id)


async def _subject_scope(db: AsyncSession, subject_id: int) -> Scope:
    return await _via_class(db, Subject, subject_id, "Subject")


async def _timetable_scope(db: AsyncSession, timetable_id: int) -> Scope:
    return await _via_class(db, Timetable, timetable_id, "Timetable entry")


async def _student_attendance_scope(db: AsyncSession, attendance_id: int) -> Scope:
    student_id = (
        await db.execute(
            select(Attendance.student_id).where(
                Attendance.id == attendance_id, Attendance.student_id.is_not(None)
            )
        )
    ).scalar_one_or_none()
    if student_id is None:
        raise NotFoundError("Attendance record not found")
    return await _student_scope(db, student_id)


async def _teacher_attendance_scope(db: AsyncSession, attendance_id: int) -> Scope:
    teacher_id = (
        await db.execute(
            select(Attendance.teacher_id).where(
                Attendance.id == attendance_id, Attendance.teacher_id.is_not(None)
            )
        )
    ).scalar_one_or_none()
    if teacher_id is None:
        raise NotFoundError("Attendance record not found")
    return await _teacher_scope(db, teacher_id)


async def _fee_scope(db: AsyncSession, fee_id: int) -> Scope:
    student_id = (await db.execute(select(Fee.student_id).where(Fee.id == fee_id))).scalar_one_or_none()
    if student_id is None:
        raise NotFoundError("Fee record not found")
    return await _student_scope(db, student_id)


async def _salary_scope(db: AsyncSession, salary_id: int) -> Scope:
    row = (
        await db.execute(select(Salary.teacher_id, Salary.staff_id).where(Salary.id == salary_id))
    ).one_or_none()
    if row is None:
        raise NotFoundError("Salary record not found")
    if row.teacher_id is not None:
        return await _teacher_scope(db, row.teacher_id)
    return await _staff_scope(db, row.staff_id)


async def _report_scope(db: AsyncSession, report_id: int) -> Scope:
    student_id = (await db.execute(select(Report.student_id).where(Report.id == report_id))).scalar_one_or_none()
    if student_id is None:
        raise NotFoundError("Report not found")
    return await _student_scope(db, student_id)


def _direct(model, label: str) -> Resolver:
    async def _resolve(db: AsyncSession, entity_id: int) -> Scope:
        school_id = (await db.execute(select(model.school_id).where(model.id == entity_id))).scalar_one_or_none()
        if school_id is None:
            raise NotFoundError(f"{label} not found")
        return Scope(owner_school_id=school_id)

    return _resolve


# Keyed by the kind whose table the id refers to. The fee and salary views are
# keyed by the student / teacher they list, the dashboard by its school.
RESOLVERS: Dict[EntityKind, Resolver] = {
    EntityKind.SCHOOL: _school_scope,
    EntityKind.USER: _user_scope,
    EntityKind.CLASS: _class_scope,
    EntityKind.STUDENT: _student_scope,
    EntityKind.TEACHER: _teacher_scope,
    EntityKind.STAFF: _staff_scope,
    EntityKind.SUBJECT: _subject_scope,
    EntityKind.TIMETABLE: _timetable_scope,
    EntityKind.STUDENT_ATTENDANCE: _student_attendance_scope,
    EntityKind.TEACHER_ATTENDANCE: _teacher_attendance_scope,
    EntityKind.FEE: _fee_scope,
    EntityKind.STUDENT_FEE: _student_scope,
    EntityKind.SALARY: _salary_scope,
    EntityKind.TEACHER_SALARY: _teacher_scope,
    EntityKind.REPORT: _report_scope,
    EntityKind.NOTICE: _direct(Notice, "Notice"),
    EntityKind.EVENT: _direct(Event, "Event"),
    EntityKind.HOLIDAY: _direct(Holiday, "Holiday"),
    EntityKind.DASHBOARD: _school_scope,
}


async def resolve_scope(db: AsyncSession, kind: EntityKind, entity_id: int) -> Scope:
    """Return the owning school (and owning user, where one exists) of entity_id."""
    return await RESOLVERS[kind](db, entity_id)


async def ensure_same_school(
    db: AsyncSession,
    kind: EntityKind,
    entity_id: int,
    school_id: int,
    message: str,
) -> None:
    """Cross-reference integrity: a referenced row must exist and live in school_id."""
    scope = await resolve_scope(db, kind, entity_id)
    if scope.owner_school_id != school_id:
        raise ValidationError(message)
