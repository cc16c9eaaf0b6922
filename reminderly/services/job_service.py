"""Scheduled job runs with single-run exclusion and a persisted run log."""
from __future__ import annotations

import datetime as dt
import logging
import time
from typing import Any, Callable, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reminderly import metrics
from reminderly.core.config import settings
from reminderly.core.exceptions import JobAlreadyRunningError, UnknownJobTypeError
from reminderly.models.models import CronJobLog, JobStatus, JobType, TriggerType, utcnow
from reminderly.services.brevo_service import get_email_sender
from reminderly.services.reminders import DispatchEngine, EmailSender, RecurrenceAdvancer, SqlReminderStore
from reminderly.services.reminders.dates import current_local_date

logger = logging.getLogger(__name__)


def parse_job_type(value: str | JobType) -> JobType:
    try:
        return JobType(value)
    except ValueError as exc:
        raise UnknownJobTypeError(str(value)) from exc


class JobRunService:
    """Runs the batch jobs and records each run in ``cron_job_logs``.

    A partial unique index allows one ``started`` row per job type, so an
    overlapping scheduled and manual run is rejected with
    ``JobAlreadyRunningError``. A ``started`` row older than
    ``JOB_STALE_AFTER_MINUTES`` is assumed to belong to a dead worker and is
    marked abandoned before the next run starts.
    """

    def __init__(
        self,
        db: Session,
        sender_factory: Callable[[], EmailSender] = get_email_sender,
        today: dt.date | None = None,
    ):
        self.db = db
        self.sender_factory = sender_factory
        self.today = today

    def _today(self) -> dt.date:
        return self.today or current_local_date(settings.REMINDER_TIMEZONE)

    def _reclaim_stale(self, job_type: JobType) -> None:
        cutoff = utcnow() - dt.timedelta(minutes=settings.JOB_STALE_AFTER_MINUTES)
        reclaimed = self.db.execute(
            update(CronJobLog)
            .where(
                CronJobLog.job_type == job_type.value,
                CronJobLog.status == JobStatus.STARTED.value,
                CronJobLog.executed_at < cutoff,
            )
            .values(
                status=JobStatus.ABANDONED.value,
                completed_at=utcnow(),
                result_data={"success": False, "error": "abandoned after worker stopped responding"},
            )
        ).rowcount
        if reclaimed:
            self.db.commit()
            logger.warning("Marked %s stale %s run(s) as abandoned", reclaimed, job_type.value)

    def start(self, job_type: JobType, trigger_type: str) -> CronJobLog:
        self._reclaim_stale(job_type)
        run = CronJobLog(
            job_type=job_type.value,
            trigger_type=trigger_type,
            status=JobStatus.STARTED.value,
            details={"triggered_by": trigger_type},
        )
        self.db.add(run)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("Rejected overlapping %s run (%s)", job_type.value, trigger_type)
            raise JobAlreadyRunningError(job_type.value) from exc
        logger.info(
            "Job %s started | run=%s trigger=%s",
            job_type.value,
            run.id,
            trigger_type,
            extra={"job_type": job_type.value, "trigger_type": trigger_type},
        )
        return run

    def finish(self, run: CronJobLog, status: JobStatus, result_data: dict[str, Any]) -> None:
        run.status = status.value
        run.result_data = result_data
        run.completed_at = utcnow()
        self.db.commit()

    def _execute(self, job_type: JobType, trigger_type: str, body: Callable[[], Any]) -> dict[str, Any]:
        run = self.start(job_type, trigger_type)
        started = time.monotonic()
        try:
            result = body().to_dict()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Job %s crashed", job_type.value)
            self.db.rollback()
            result = {"success": False, "error": str(exc)}
        status = JobStatus.COMPLETED if result.get("success") else JobStatus.FAILED
        self.finish(run, status, result)
        metrics.job_run(job_type.value, status.value, time.monotonic() - started)
        logger.info(
            "Job %s finished | run=%s status=%s",
            job_type.value,
            run.id,
            status.value,
            extra={"job_type": job_type.value, "trigger_type": trigger_type},
        )
        return {"job_id": run.id, "job_type": job_type.value, "trigger_type": trigger_type, **result}

    def run_dispatch(self, trigger_type: str = TriggerType.SCHEDULED.value) -> dict[str, Any]:
        def body():
            sender = self.sender_factory()
            try:
                return DispatchEngine(
                    SqlReminderStore(self.db),
                    sender,
                    self._today(),
                    date_format=settings.REMINDER_DATE_FORMAT,
                    trigger_type=trigger_type,
                ).run()
            finally:
                close = getattr(sender, "close", None)
                if close is not None:
                    close()

        return self._execute(JobType.PROCESS_REMINDERS, trigger_type, body)

    def run_recurring(self, trigger_type: str = TriggerType.SCHEDULED.value) -> dict[str, Any]:
        return self._execute(
            JobType.PROCESS_RECURRING,
            trigger_type,
            lambda: RecurrenceAdvancer(SqlReminderStore(self.db), self._today()).run(),
        )

    def run(self, job_type: str | JobType, trigger_type: str = TriggerType.MANUAL.value) -> dict[str, Any]:
        job = parse_job_type(job_type)
        if job == JobType.PROCESS_REMINDERS:
            return self.run_dispatch(trigger_type)
        return self.run_recurring(trigger_type)

    def list_logs(self, limit: int = 50, job_type: str | None = None) -> Sequence[CronJobLog]:
        query = select(CronJobLog).order_by(CronJobLog.executed_at.desc(), CronJobLog.id.desc())
        if job_type:
            query = query.where(CronJobLog.job_type == parse_job_type(job_type).value)
        return self.db.scalars(query.limit(limit)).all()
