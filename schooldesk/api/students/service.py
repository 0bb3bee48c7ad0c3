import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api.people import check_account_link
from schooldesk.auth.access import authorize, authorize_create, class_in_reach, school_filter
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.enums import Role
from schooldesk.core.exceptions import ConflictError
from schooldesk.core.models import Attendance, Fee, Report, SchoolClass, Student

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


def _student_to_response(s: Student, class_name: Optional[str]) -> StudentResponse:
    return StudentResponse(
        id=s.id,
        name=s.name,
        roll_no=s.roll_no,
        email=s.email,
        gender=s.gender,
        phone=s.phone,
        class_id=s.class_id,
        class_name=class_name,
        user_id=s.user_id,
        created_at=s.created_at,
    )


def _with_class_name():
    return select(Student, SchoolClass.name).join(SchoolClass, SchoolClass.id == Student.class_id)


async def _load(db: AsyncSession, student_id: int) -> StudentResponse:
    row = (await db.execute(_with_class_name().where(Student.id == student_id))).one()
    return _student_to_response(row[0], row[1])


async def _ensure_unique_roll_no(
    db: AsyncSession, class_id: int, roll_no: str, exclude_id: Optional[int] = None
) -> None:
    stmt = select(Student.id).where(Student.class_id == class_id, Student.roll_no == roll_no)
    if exclude_id is not None:
        stmt = stmt.where(Student.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError("Roll number already exists in this class")


async def list_students(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[StudentResponse]:
    target = school_filter(principal, EntityKind.STUDENT, school_id)
    stmt = _with_class_name().order_by(SchoolClass.name, Student.roll_no)
    if target is not None:
        stmt = stmt.where(SchoolClass.school_id == target)
    return [_student_to_response(s, name) for s, name in (await db.execute(stmt)).all()]


async def list_students_by_class(db: AsyncSession, principal: Principal, class_id: int) -> List[StudentResponse]:
    await class_in_reach(db, principal, EntityKind.STUDENT, class_id)
    stmt = _with_class_name().where(Student.class_id == class_id).order_by(Student.roll_no)
    return [_student_to_response(s, name) for s, name in (await db.execute(stmt)).all()]


async def get_student(db: AsyncSession, principal: Principal, student_id: int) -> StudentResponse:
    await authorize(db, principal, EntityKind.STUDENT, Action.READ, student_id)
    return await _load(db, student_id)


async def create_student(db: AsyncSession, principal: Principal, payload: StudentCreate) -> StudentResponse:
    scope = await authorize_create(db, principal, EntityKind.STUDENT, EntityKind.CLASS, payload.class_id)
    if payload.user_id is not None:
        await check_account_link(db, Student, payload.user_id, Role.STUDENT, scope.owner_school_id)
    await _ensure_unique_roll_no(db, payload.class_id, payload.roll_no)

    obj = Student(
        class_id=payload.class_id,
        user_id=payload.user_id,
        name=payload.name,
        roll_no=payload.roll_no,
        email=payload.email,
        gender=payload.gender.value if payload.gender else None,
        phone=payload.phone,
    )
    db.add(obj)
    await db.commit()
    logger.info("Student %s created in class %s", obj.id, obj.class_id)
    return await _load(db, obj.id)


async def update_student(
    db: AsyncSession, principal: Principal, student_id: int, payload: StudentUpdate
) -> StudentResponse:
    scope = await authorize(db, principal, EntityKind.STUDENT, Action.UPDATE, student_id)
    obj = await db.get(Student, student_id)
    home_school_id = scope.owner_school_id

    class_id = obj.class_id
    if payload.class_id is not None and payload.class_id != obj.class_id:
        # The destination class must be writable too
        scope = await authorize_create(db, principal, EntityKind.STUDENT, EntityKind.CLASS, payload.class_id)
        class_id = payload.class_id
    user_id = payload.user_id if payload.user_id is not None else obj.user_id
    if user_id is not None and (user_id != obj.user_id or scope.owner_school_id != home_school_id):
        await check_account_link(db, Student, user_id, Role.STUDENT, scope.owner_school_id, exclude_id=student_id)
    roll_no = payload.roll_no if payload.roll_no is not None else obj.roll_no
    await _ensure_unique_roll_no(db, class_id, roll_no, exclude_id=student_id)

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if data.get("gender") is not None:
        data["gender"] = data["gender"].value
    for key, value in data.items():
        setattr(obj, key, value)
    await db.commit()
    return await _load(db, student_id)


async def delete_student(db: AsyncSession, principal: Principal, student_id: int) -> None:
    """Delete a student together with their attendance, fees and reports."""
    await authorize(db, principal, EntityKind.STUDENT, Action.DELETE, student_id)
    await db.execute(delete(Attendance).where(Attendance.student_id == student_id))
    await db.execute(delete(Fee).where(Fee.student_id == student_id))
    await db.execute(delete(Report).where(Report.student_id == student_id))
    await db.execute(delete(Student).where(Student.id == student_id))
    await db.commit()
    logger.info("Student %s deleted by user %s", student_id, principal.user_id)
