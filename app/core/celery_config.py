import os

from celery import Celery

from app.core.redis_config import get_redis_url

# Seconds between booked_count reconciliation runs
RECONCILE_INTERVAL_SECONDS = int(os.getenv("RECONCILE_INTERVAL_SECONDS", "3600"))


def make_celery(app_name: str = "event_booking") -> Celery:
    redis_url = get_redis_url()
    celery = Celery(app_name, broker=redis_url, backend=redis_url, include=["app.tasks"])
    celery.conf.task_serializer = "json"
    celery.conf.result_serializer = "json"
    celery.conf.accept_content = ["json"]
    celery.conf.result_persistent = False
    celery.conf.task_track_started = True
    celery.conf.beat_schedule = {
        "reconcile-booked-counts": {
            "task": "app.tasks.reconcile_all_booked_counts_task",
            "schedule": RECONCILE_INTERVAL_SECONDS,
        },
    }
    return celery


celery_app = make_celery()
