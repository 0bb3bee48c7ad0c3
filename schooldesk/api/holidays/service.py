from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api import bulletin
from schooldesk.auth.rbac import EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ValidationError
from schooldesk.core.models import Holiday

from .schemas import END_BEFORE_START, HolidayCreate, HolidayResponse, HolidayUpdate


async def list_holidays(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[HolidayResponse]:
    rows = await bulletin.list_rows(db, principal, Holiday, EntityKind.HOLIDAY, Holiday.start_date, school_id)
    return [HolidayResponse.model_validate(h) for h in rows]


async def create_holiday(db: AsyncSession, principal: Principal, payload: HolidayCreate) -> HolidayResponse:
    obj = await bulletin.create_row(
        db, principal, Holiday, EntityKind.HOLIDAY, payload.school_id, payload.model_dump(exclude={"school_id"})
    )
    return HolidayResponse.model_validate(obj)


async def update_holiday(
    db: AsyncSession, principal: Principal, holiday_id: int, payload: HolidayUpdate
) -> HolidayResponse:
    obj = await bulletin.get_for_update(db, principal, Holiday, EntityKind.HOLIDAY, holiday_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    start = data.get("start_date", obj.start_date)
    end = data.get("end_date", obj.end_date)
    if end < start:
        raise ValidationError(END_BEFORE_START)
    for key, value in data.items():
        setattr(obj, key, value)
    return HolidayResponse.model_validate(await bulletin.save(db, obj))


async def delete_holiday(db: AsyncSession, principal: Principal, holiday_id: int) -> None:
    await bulletin.delete_row(db, principal, Holiday, EntityKind.HOLIDAY, holiday_id)
