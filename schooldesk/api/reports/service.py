import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, authorize_create
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import NotFoundError, ValidationError
from schooldesk.core.models import Report, Student, Subject

from .schemas import ReportCreate, ReportResponse, ReportUpdate

logger = logging.getLogger(__name__)


def _report_to_response(r: Report, subject_name: str) -> ReportResponse:
    return ReportResponse(
        id=r.id,
        student_id=r.student_id,
        subject_id=r.subject_id,
        subject_name=subject_name,
        marks=r.marks,
        remarks=r.remarks,
        created_at=r.created_at,
    )


def _with_subject_name():
    return select(Report, Subject.name).join(Subject, Subject.id == Report.subject_id)


async def _load(db: AsyncSession, report_id: int) -> ReportResponse:
    report, name = (await db.execute(_with_subject_name().where(Report.id == report_id))).one()
    return _report_to_response(report, name)


async def _ensure_subject_in_class(db: AsyncSession, student_id: int, subject_id: int) -> None:
    subject_class = (await db.execute(select(Subject.class_id).where(Subject.id == subject_id))).scalar_one_or_none()
    if subject_class is None:
        raise NotFoundError("Subject not found")
    student_class = (await db.execute(select(Student.class_id).where(Student.id == student_id))).scalar_one()
    if subject_class != student_class:
        raise ValidationError("Subject is not taught in the student's class")


async def list_reports(db: AsyncSession, principal: Principal, student_id: int) -> List[ReportResponse]:
    await authorize(db, principal, EntityKind.REPORT, Action.READ, student_id, via=EntityKind.STUDENT)
    stmt = _with_subject_name().where(Report.student_id == student_id).order_by(Subject.name)
    return [_report_to_response(r, name) for r, name in (await db.execute(stmt)).all()]


async def create_report(db: AsyncSession, principal: Principal, payload: ReportCreate) -> ReportResponse:
    await authorize_create(db, principal, EntityKind.REPORT, EntityKind.STUDENT, payload.student_id)
    await _ensure_subject_in_class(db, payload.student_id, payload.subject_id)
    report = Report(**payload.model_dump())
    db.add(report)
    await db.commit()
    logger.info("Report %s created for student %s", report.id, report.student_id)
    return await _load(db, report.id)


async def update_report(
    db: AsyncSession, principal: Principal, report_id: int, payload: ReportUpdate
) -> ReportResponse:
    await authorize(db, principal, EntityKind.REPORT, Action.UPDATE, report_id)
    report = await db.get(Report, report_id)
    if payload.subject_id is not None and payload.subject_id != report.subject_id:
        await _ensure_subject_in_class(db, report.student_id, payload.subject_id)
        report.subject_id = payload.subject_id
    if payload.marks is not None:
        report.marks = payload.marks
    if payload.remarks is not None:
        report.remarks = payload.remarks
    await db.commit()
    return await _load(db, report_id)


async def delete_report(db: AsyncSession, principal: Principal, report_id: int) -> None:
    await authorize(db, principal, EntityKind.REPORT, Action.DELETE, report_id)
    await db.delete(await db.get(Report, report_id))
    await db.commit()
