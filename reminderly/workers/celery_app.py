from __future__ import annotations

from celery import Celery
from celery.schedules import crontab

from reminderly.core.config import settings


def _create_celery() -> Celery:
    celery = Celery(
        "reminderly",
        broker=settings.REDIS_URL,
        backend=settings.REDIS_URL,
        include=["reminderly.workers.tasks"],
    )
    celery.conf.update(
        task_default_queue="default",
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_always_eager=settings.ENV.lower() in {"test"},
    )
    # Beat schedule (only active outside test env)
    if settings.ENV.lower() not in {"test"}:
        celery.conf.beat_schedule = {
            "recurring-reminders": {
                "task": "reminders.process_recurring",
                "schedule": crontab(minute=0, hour=settings.RECURRING_HOUR_UTC),
            },
            "due-reminders": {
                "task": "reminders.process_due",
                "schedule": crontab(minute=0, hour=settings.DISPATCH_HOUR_UTC),
            },
        }
    return celery


celery_app = _create_celery()
