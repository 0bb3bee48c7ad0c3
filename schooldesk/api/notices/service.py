from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api import bulletin
from schooldesk.auth.rbac import EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.models import Notice

from .schemas import NoticeCreate, NoticeResponse, NoticeUpdate


async def list_notices(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[NoticeResponse]:
    rows = await bulletin.list_rows(db, principal, Notice, EntityKind.NOTICE, Notice.date.desc(), school_id)
    return [NoticeResponse.model_validate(n) for n in rows]


async def create_notice(db: AsyncSession, principal: Principal, payload: NoticeCreate) -> NoticeResponse:
    obj = await bulletin.create_row(
        db, principal, Notice, EntityKind.NOTICE, payload.school_id, payload.model_dump(exclude={"school_id"})
    )
    return NoticeResponse.model_validate(obj)


async def update_notice(db: AsyncSession, principal: Principal, notice_id: int, payload: NoticeUpdate) -> NoticeResponse:
    obj = await bulletin.get_for_update(db, principal, Notice, EntityKind.NOTICE, notice_id)
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(obj, key, value)
    return NoticeResponse.model_validate(await bulletin.save(db, obj))


async def delete_notice(db: AsyncSession, principal: Principal, notice_id: int) -> None:
    await bulletin.delete_row(db, principal, Notice, EntityKind.NOTICE, notice_id)
