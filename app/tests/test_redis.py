"""
Test the per-event Redis booking lock.
"""
import pytest

from app.core.exceptions import BookingBusyError
from app.services import bookings as booking_service
from app.services.bookings import event_lock


class TestEventLock:
    """Test locking around booking mutations."""

    def test_lock_held_inside_block(self, fake_redis):
        with event_lock(1):
            other = fake_redis.lock("event_lock:1", timeout=10)
            assert other.acquire(blocking=False) is False

        # Released on exit
        other = fake_redis.lock("event_lock:1", timeout=10)
        assert other.acquire(blocking=False) is True
        other.release()

    def test_lock_released_when_block_raises(self, fake_redis):
        with pytest.raises(RuntimeError):
            with event_lock(2):
                raise RuntimeError("boom")

        other = fake_redis.lock("event_lock:2", timeout=10)
        assert other.acquire(blocking=False) is True
        other.release()

    def test_busy_lock_raises(self, fake_redis, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(booking_service, "BOOKING_LOCK_BLOCKING_TIMEOUT", 0.2)
        holder = fake_redis.lock("event_lock:3", timeout=10)
        assert holder.acquire(blocking=False) is True

        with pytest.raises(BookingBusyError) as exc_info:
            with event_lock(3):
                pass

        assert exc_info.value.status_code == 503
        holder.release()

    def test_locks_are_per_event(self, fake_redis):
        with event_lock(4):
            with event_lock(5):
                assert fake_redis.get("event_lock:4") is not None
                assert fake_redis.get("event_lock:5") is not None

    def test_disabled_lock_never_touches_redis(self, no_booking_lock, monkeypatch: pytest.MonkeyPatch):
        def fail():
            raise AssertionError("Redis should not be used")

        monkeypatch.setattr(booking_service, "get_redis_client", fail)

        with event_lock(6):
            pass
