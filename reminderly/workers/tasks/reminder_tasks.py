"""Daily reminder jobs.

Recurring definitions run an hour before dispatch so instances spawned for
today are already in place when the dispatch run evaluates them.
"""
from __future__ import annotations

import logging
from typing import Any

from reminderly.core.exceptions import JobAlreadyRunningError
from reminderly.db.session import session_scope
from reminderly.models.models import TriggerType
from reminderly.services.job_service import JobRunService
from reminderly.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="reminders.process_due", soft_time_limit=900, time_limit=960)
def process_due_reminders(trigger_type: str = TriggerType.SCHEDULED.value) -> dict[str, Any]:
    """Send every reminder whose lead-time interval matches today."""
    try:
        with session_scope() as db:
            return JobRunService(db).run_dispatch(trigger_type)
    except JobAlreadyRunningError as exc:
        logger.warning("Skipping dispatch: %s", exc.message)
        return {"success": False, "skipped": True, "error": exc.message}


@celery_app.task(name="reminders.process_recurring", soft_time_limit=900, time_limit=960)
def process_recurring_reminders(trigger_type: str = TriggerType.SCHEDULED.value) -> dict[str, Any]:
    """Spawn reminders from due recurring definitions and advance their schedule."""
    try:
        with session_scope() as db:
            return JobRunService(db).run_recurring(trigger_type)
    except JobAlreadyRunningError as exc:
        logger.warning("Skipping recurring run: %s", exc.message)
        return {"success": False, "skipped": True, "error": exc.message}
