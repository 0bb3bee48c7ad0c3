import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, authorize_create
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ConflictError, NotFoundError
from schooldesk.core.models import Attendance

from .schemas import AttendanceCreate, AttendanceResponse, AttendanceUpdate

logger = logging.getLogger(__name__)


async def _ensure_no_duplicate(
    db: AsyncSession,
    *,
    student_id: Optional[int],
    teacher_id: Optional[int],
    on: date,
    exclude_id: Optional[int] = None,
) -> None:
    stmt = select(Attendance.id).where(Attendance.date == on)
    if student_id is not None:
        stmt = stmt.where(Attendance.student_id == student_id)
        who = "student"
    else:
        stmt = stmt.where(Attendance.teacher_id == teacher_id)
        who = "teacher"
    if exclude_id is not None:
        stmt = stmt.where(Attendance.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError(f"Attendance record already exists for this {who} on this date")


async def _authorize_record(db: AsyncSession, principal: Principal, action: Action, attendance_id: int) -> Attendance:
    record = await db.get(Attendance, attendance_id)
    if record is None:
        raise NotFoundError("Attendance record not found")
    kind = EntityKind.STUDENT_ATTENDANCE if record.student_id is not None else EntityKind.TEACHER_ATTENDANCE
    await authorize(db, principal, kind, action, attendance_id)
    return record


async def list_for_student(db: AsyncSession, principal: Principal, student_id: int) -> List[AttendanceResponse]:
    await authorize(db, principal, EntityKind.STUDENT_ATTENDANCE, Action.READ, student_id, via=EntityKind.STUDENT)
    stmt = select(Attendance).where(Attendance.student_id == student_id).order_by(Attendance.date.desc())
    return [AttendanceResponse.model_validate(a) for a in (await db.execute(stmt)).scalars().all()]


async def list_for_teacher(db: AsyncSession, principal: Principal, teacher_id: int) -> List[AttendanceResponse]:
    await authorize(db, principal, EntityKind.TEACHER_ATTENDANCE, Action.READ, teacher_id, via=EntityKind.TEACHER)
    stmt = select(Attendance).where(Attendance.teacher_id == teacher_id).order_by(Attendance.date.desc())
    return [AttendanceResponse.model_validate(a) for a in (await db.execute(stmt)).scalars().all()]


async def create_attendance(db: AsyncSession, principal: Principal, payload: AttendanceCreate) -> AttendanceResponse:
    if payload.student_id is not None:
        await authorize_create(
            db, principal, EntityKind.STUDENT_ATTENDANCE, EntityKind.STUDENT, payload.student_id
        )
    else:
        await authorize_create(
            db, principal, EntityKind.TEACHER_ATTENDANCE, EntityKind.TEACHER, payload.teacher_id
        )
    await _ensure_no_duplicate(
        db, student_id=payload.student_id, teacher_id=payload.teacher_id, on=payload.date
    )

    record = Attendance(
        student_id=payload.student_id,
        teacher_id=payload.teacher_id,
        date=payload.date,
        status=payload.status.value,
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)
    logger.info("Attendance %s recorded by user %s", record.id, principal.user_id)
    return AttendanceResponse.model_validate(record)


async def update_attendance(
    db: AsyncSession, principal: Principal, attendance_id: int, payload: AttendanceUpdate
) -> AttendanceResponse:
    record = await _authorize_record(db, principal, Action.UPDATE, attendance_id)
    if payload.date is not None and payload.date != record.date:
        await _ensure_no_duplicate(
            db,
            student_id=record.student_id,
            teacher_id=record.teacher_id,
            on=payload.date,
            exclude_id=attendance_id,
        )
        record.date = payload.date
    if payload.status is not None:
        record.status = payload.status.value
    await db.commit()
    await db.refresh(record)
    return AttendanceResponse.model_validate(record)


async def delete_attendance(db: AsyncSession, principal: Principal, attendance_id: int) -> None:
    record = await _authorize_record(db, principal, Action.DELETE, attendance_id)
    await db.delete(record)
    await db.commit()
