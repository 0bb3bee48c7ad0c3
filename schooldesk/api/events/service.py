from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api import bulletin
from schooldesk.auth.rbac import EntityKind
from schooldesk.auth.schemas import Principal
from schooldesk.core.models import Event

from .schemas import EventCreate, EventResponse, EventUpdate


async def list_events(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[EventResponse]:
    rows = await bulletin.list_rows(db, principal, Event, EntityKind.EVENT, Event.date, school_id)
    return [EventResponse.model_validate(e) for e in rows]


async def create_event(db: AsyncSession, principal: Principal, payload: EventCreate) -> EventResponse:
    obj = await bulletin.create_row(
        db, principal, Event, EntityKind.EVENT, payload.school_id, payload.model_dump(exclude={"school_id"})
    )
    return EventResponse.model_validate(obj)


async def update_event(db: AsyncSession, principal: Principal, event_id: int, payload: EventUpdate) -> EventResponse:
    obj = await bulletin.get_for_update(db, principal, Event, EntityKind.EVENT, event_id)
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(obj, key, value)
    return EventResponse.model_validate(await bulletin.save(db, obj))


async def delete_event(db: AsyncSession, principal: Principal, event_id: int) -> None:
    await bulletin.delete_row(db, principal, Event, EntityKind.EVENT, event_id)
