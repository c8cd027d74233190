import os

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Per-event booking lock; the conditional capacity update is atomic without it
BOOKING_LOCK_ENABLED = os.getenv("BOOKING_LOCK_ENABLED", "true").lower() in ("1", "true", "yes")
BOOKING_LOCK_TIMEOUT = int(os.getenv("BOOKING_LOCK_TIMEOUT", "10"))
BOOKING_LOCK_BLOCKING_TIMEOUT = int(os.getenv("BOOKING_LOCK_BLOCKING_TIMEOUT", "5"))


def get_redis_url():
    return REDIS_URL


def booking_lock_enabled() -> bool:
    return BOOKING_LOCK_ENABLED
