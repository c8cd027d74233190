from loguru import logger

from app.core.celery_config import celery_app
from app.database.db import SessionLocal
from app.models import bookings, events, users  # noqa: F401  (register tables)
from app.services.bookings import reconcile_all_booked_counts, reconcile_booked_count


@celery_app.task(bind=True)
def reconcile_booked_count_task(self, event_id: int):
    """Repair one event's booked_count from its active bookings."""
    db = SessionLocal()
    try:
        return reconcile_booked_count(db, event_id)
    finally:
        db.close()


@celery_app.task(bind=True)
def reconcile_all_booked_counts_task(self):
    db = SessionLocal()
    try:
        results = reconcile_all_booked_counts(db)
    finally:
        db.close()
    logger.info(f"Reconciled booked_count for {len(results)} events")
    return results
