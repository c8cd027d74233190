from collections.abc import Iterator
from contextlib import contextmanager

import redis
from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import (
    BookingBusyError,
    CapacityExceededError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from app.core.redis_config import (
    BOOKING_LOCK_BLOCKING_TIMEOUT,
    BOOKING_LOCK_TIMEOUT,
    booking_lock_enabled,
    get_redis_url,
)
from app.core.timeutils import utcnow
from app.models.bookings import Booking, BookingStatus
from app.models.events import Event
from app.models.users import User


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


@contextmanager
def event_lock(event_id: int) -> Iterator[None]:
    """
    Serialize booking mutations for one event across workers.

    The capacity check itself is a conditional UPDATE, so the lock only
    keeps contending requests from racing each other into the database.
    """
    if not booking_lock_enabled():
        yield
        return

    redis_client = get_redis_client()
    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=BOOKING_LOCK_TIMEOUT,
        blocking_timeout=BOOKING_LOCK_BLOCKING_TIMEOUT,
    )
    try:
        acquired = lock.acquire(blocking=True, blocking_timeout=BOOKING_LOCK_BLOCKING_TIMEOUT)
    except redis.exceptions.LockError:  # type: ignore
        raise BookingBusyError()
    if not acquired:
        logger.warning(f"Timed out waiting for booking lock on event {event_id}")
        raise BookingBusyError()

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:  # type: ignore
            # Lock expired while we held it; the transaction already finished
            logger.warning(f"Booking lock for event {event_id} expired before release")


def _booked_tickets_query(event_id: int):
    return select(func.coalesce(func.sum(Booking.number_of_tickets), 0)).where(
        Booking.event_id == event_id,
        Booking.status != BookingStatus.CANCELLED.value,
    )


def create_booking(db: Session, *, event_id: int, user_id: int, number_of_tickets: int = 1) -> Booking:
    """
    Book tickets for an event.

    Availability check and counter increment happen in one conditional
    UPDATE inside the same transaction as the insert, so two requests can
    never both take the last spots.
    """
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    if event.date < utcnow():
        raise InvalidStateError("Cannot book past events")

    with event_lock(event_id):
        try:
            booking = _create_booking_in_transaction(db, event_id, user_id, number_of_tickets)
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info(
        f"Booking {booking.id} created: user={user_id} event={event_id} tickets={number_of_tickets}"
    )
    return booking


def _create_booking_in_transaction(
    db: Session, event_id: int, user_id: int, number_of_tickets: int
) -> Booking:
    """Internal function to create booking within a transaction."""
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.booked_count + number_of_tickets <= Event.capacity)
        .values(booked_count=Event.booked_count + number_of_tickets)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        remaining = db.scalar(
            select(Event.capacity - Event.booked_count).where(Event.id == event_id)
        )
        logger.info(
            f"Rejected booking for event {event_id}: requested {number_of_tickets}, "
            f"{remaining} left"
        )
        raise CapacityExceededError(max(int(remaining or 0), 0))

    booking = Booking(
        event_id=event_id,
        user_id=user_id,
        number_of_tickets=number_of_tickets,
        status=BookingStatus.CONFIRMED.value,
    )
    db.add(booking)
    db.flush()  # gets booking.id
    return booking


def cancel_booking(db: Session, *, booking_id: int, user: User) -> None:
    """Delete a booking owned by `user` (or any booking, for admins)."""
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    if booking.user_id != user.id and not user.is_admin:
        raise ForbiddenError("Not authorized to cancel this booking")

    event = db.get(Event, booking.event_id)
    if event is not None and event.date < utcnow():
        raise InvalidStateError("Cannot cancel booking for past events")

    event_id = booking.event_id
    with event_lock(event_id):
        try:
            if booking.status != BookingStatus.CANCELLED.value:
                _release_tickets(db, event_id, booking.number_of_tickets)
            db.delete(booking)
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info(f"Booking {booking_id} cancelled by user {user.id}")


def _release_tickets(db: Session, event_id: int, number_of_tickets: int) -> None:
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(Event.booked_count >= number_of_tickets)
        .values(booked_count=Event.booked_count - number_of_tickets)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        logger.warning(f"booked_count for event {event_id} is out of sync; run reconciliation")


def list_user_bookings(db: Session, user_id: int) -> list[Booking]:
    stmt = (
        select(Booking)
        .where(Booking.user_id == user_id)
        .options(selectinload(Booking.event))
        .order_by(Booking.booking_date.desc(), Booking.id.desc())
    )
    return list(db.scalars(stmt))


def reconcile_booked_count(db: Session, event_id: int) -> int | None:
    """
    Recompute an event's booked_count from its non-cancelled bookings.

    The repair is one UPDATE with the sum as a subquery, so a booking that
    commits while this runs is counted rather than overwritten.
    """
    with event_lock(event_id):
        stored = db.scalar(
            select(Event.booked_count).where(Event.id == event_id).with_for_update()
        )
        if stored is None:
            return None

        db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(booked_count=_booked_tickets_query(event_id).scalar_subquery())
            .execution_options(synchronize_session=False)
        )
        total = int(db.scalar(select(Event.booked_count).where(Event.id == event_id)) or 0)
        db.commit()

    if stored != total:
        logger.warning(f"Event {event_id} booked_count drifted: stored={stored} actual={total}")
    return total


def reconcile_all_booked_counts(db: Session) -> dict[int, int]:
    event_ids = list(db.scalars(select(Event.id)))
    results = {}
    for event_id in event_ids:
        total = reconcile_booked_count(db, event_id)
        if total is not None:
            results[event_id] = total
    return results


def get_event_stats(db: Session, event_id: int) -> dict:
    event = db.get(Event, event_id)
    if not event:
        return {}

    active_bookings = db.scalar(
        select(func.count(Booking.id)).where(
            Booking.event_id == event_id,
            Booking.status != BookingStatus.CANCELLED.value,
        )
    )

    return {
        "event_id": event.id,
        "capacity": event.capacity,
        "booked_count": event.booked_count,
        "available_spots": event.available_spots,
        "active_bookings": int(active_bookings or 0),
    }


def get_overall_report(db: Session) -> dict:
    """Return aggregated totals across all events."""
    total_capacity = db.scalar(select(func.sum(Event.capacity)))
    total_booked = db.scalar(select(func.sum(Event.booked_count)))

    total_active = db.scalar(
        select(func.count(Booking.id)).where(Booking.status != BookingStatus.CANCELLED.value)
    )

    return {
        "total_capacity": int(total_capacity or 0),
        "total_booked": int(total_booked or 0),
        "total_active_bookings": int(total_active or 0),
    }
