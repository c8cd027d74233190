"""
Concurrent bookings against the same event must never oversell it.

Each worker books through its own session, the way separate requests
would, so the only thing standing between them is the booking lock and the
conditional capacity update.
"""
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import CapacityExceededError
from app.models.bookings import Booking
from app.services.bookings import create_booking


def attempt_booking(session_factory, event_id: int, user_id: int, tickets: int) -> str:
    db = session_factory()
    try:
        create_booking(db, event_id=event_id, user_id=user_id, number_of_tickets=tickets)
        return "ok"
    except CapacityExceededError:
        return "full"
    finally:
        db.close()


def booked_tickets(db: Session, event_id: int) -> int:
    return db.scalar(
        select(func.coalesce(func.sum(Booking.number_of_tickets), 0)).where(Booking.event_id == event_id)
    )


def run_concurrently(session_factory, event_id: int, user_ids: list[int], tickets: int = 1) -> list[str]:
    with ThreadPoolExecutor(max_workers=len(user_ids)) as executor:
        futures = [
            executor.submit(attempt_booking, session_factory, event_id, user_id, tickets)
            for user_id in user_ids
        ]
        return [f.result() for f in futures]


class TestConcurrentBookings:
    def test_last_spot_goes_to_one_request(self, db_session: Session, session_factory, make_user, make_event):
        organizer = make_user("Organizer")
        event = make_event(organizer, capacity=1)
        users = [make_user(f"Fan {i}") for i in range(10)]

        results = run_concurrently(session_factory, event.id, [u.id for u in users])

        assert results.count("ok") == 1
        assert results.count("full") == 9
        db_session.refresh(event)
        assert event.booked_count == 1
        assert booked_tickets(db_session, event.id) == 1

    def test_multi_ticket_requests_respect_capacity(
        self, db_session: Session, session_factory, make_user, make_event
    ):
        organizer = make_user("Organizer")
        event = make_event(organizer, capacity=7)
        users = [make_user(f"Group {i}") for i in range(8)]

        results = run_concurrently(session_factory, event.id, [u.id for u in users], tickets=2)

        # 3 groups of 2 fit into 7 seats
        assert results.count("ok") == 3
        db_session.refresh(event)
        assert event.booked_count == 6
        assert booked_tickets(db_session, event.id) <= event.capacity

    def test_capacity_holds_without_redis_lock(
        self, db_session: Session, session_factory, make_user, make_event, no_booking_lock
    ):
        organizer = make_user("Organizer")
        event = make_event(organizer, capacity=3)
        users = [make_user(f"Fan {i}") for i in range(8)]

        results = run_concurrently(session_factory, event.id, [u.id for u in users])

        assert results.count("ok") == 3
        assert booked_tickets(db_session, event.id) == 3


def test_concurrent_api_bookings(client: TestClient, make_user, make_event, headers_for):
    """Concurrent API requests don't cause overselling."""
    organizer = make_user("Organizer")
    event = make_event(organizer, capacity=3)
    users = [make_user(f"Fan {i}") for i in range(10)]

    def book_via_api(user) -> int:
        response = client.post(
            "/api/bookings",
            json={"eventId": event.id, "numberOfTickets": 1},
            headers=headers_for(user),
        )
        return response.status_code

    with ThreadPoolExecutor(max_workers=10) as executor:
        results = list(executor.map(book_via_api, users))

    assert results.count(201) == 3
    assert results.count(400) == 7
    stats = client.get(f"/api/events/{event.id}/stats").json()["data"]
    assert stats["bookedCount"] == 3
    assert stats["availableSpots"] == 0


@pytest.mark.parametrize("capacity,existing,requested,expected", [(10, 9, 2, "full"), (10, 9, 1, "ok")])
def test_boundary_at_capacity(
    db_session: Session, session_factory, make_user, make_event, capacity, existing, requested, expected
):
    organizer = make_user("Organizer")
    event = make_event(organizer, capacity=capacity)
    create_booking(db_session, event_id=event.id, user_id=organizer.id, number_of_tickets=existing)

    assert attempt_booking(session_factory, event.id, organizer.id, requested) == expected
