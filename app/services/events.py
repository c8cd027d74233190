from datetime import date, datetime, time, timedelta

from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.events import Event, EventCategory
from app.models.users import User
from app.schemas.events import EventCreate, EventUpdate


def day_range(day: date) -> tuple[datetime, datetime]:
    """Half-open [day 00:00, next day 00:00) window."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def list_events(
    db: Session,
    *,
    category: EventCategory | None = None,
    on_date: date | None = None,
    location: str | None = None,
    search: str | None = None,
) -> list[Event]:
    stmt = select(Event).options(selectinload(Event.organizer))

    if category:
        stmt = stmt.where(Event.category == category.value)
    if on_date:
        start, end = day_range(on_date)
        stmt = stmt.where(Event.date >= start, Event.date < end)
    if location:
        stmt = stmt.where(Event.location.ilike(f"%{location}%"))
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(Event.title.ilike(pattern), Event.description.ilike(pattern)))

    stmt = stmt.order_by(Event.date.asc(), Event.id.asc())
    return list(db.scalars(stmt))


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id, options=[selectinload(Event.organizer)])
    if event is None:
        raise NotFoundError("Event not found")
    return event


def create_event(db: Session, payload: EventCreate, *, organizer: User) -> Event:
    data = payload.model_dump()
    data["category"] = payload.category.value
    event = Event(**data, organizer_id=organizer.id, booked_count=0)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info(f"Event {event.id} created by user {organizer.id}")
    return event


def _check_can_modify(event: Event, user: User, action: str) -> None:
    if event.organizer_id != user.id and not user.is_admin:
        raise ForbiddenError(f"Not authorized to {action} this event")


def update_event(db: Session, event_id: int, payload: EventUpdate, *, user: User) -> Event:
    event = get_event(db, event_id)
    _check_can_modify(event, user, "update")

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("category") is not None:
        changes["category"] = EventCategory(changes["category"]).value
    for field, value in changes.items():
        # Columns are NOT NULL; an explicit null leaves the value unchanged
        if value is not None:
            setattr(event, field, value)

    db.commit()
    db.refresh(event)
    logger.info(f"Event {event_id} updated by user {user.id}: {sorted(changes)}")
    return event


def delete_event(db: Session, event_id: int, *, user: User) -> None:
    """Delete an event; its bookings are removed with it."""
    event = get_event(db, event_id)
    _check_can_modify(event, user, "delete")

    booking_count = len(event.bookings)
    db.delete(event)
    db.commit()
    logger.info(f"Event {event_id} deleted by user {user.id} with {booking_count} bookings")
