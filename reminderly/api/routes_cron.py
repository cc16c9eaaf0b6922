"""Batch job triggers and run history.

The GET endpoints are the scheduled hooks (an external cron or the platform
scheduler hits them); ``POST /cron/trigger`` is the operator's manual run.
"""
from typing import Any

from fastapi import APIRouter, Query

from reminderly.api.dependencies import DbDep
from reminderly.models.models import TriggerType
from reminderly.models.schemas import CronJobLogOut, JobTriggerIn
from reminderly.services.job_service import JobRunService

router = APIRouter(prefix="/cron", tags=["cron"])


@router.get("/process-reminders")
def process_reminders(db: DbDep) -> dict[str, Any]:
    return JobRunService(db).run_dispatch(TriggerType.SCHEDULED.value)


@router.get("/process-recurring")
def process_recurring(db: DbDep) -> dict[str, Any]:
    return JobRunService(db).run_recurring(TriggerType.SCHEDULED.value)


@router.post("/trigger")
def trigger_job(data: JobTriggerIn, db: DbDep) -> dict[str, Any]:
    return JobRunService(db).run(data.job_type, TriggerType.MANUAL.value)


@router.get("/logs", response_model=list[CronJobLogOut])
def list_job_logs(
    db: DbDep,
    limit: int = Query(50, ge=1, le=500),
    type: str | None = Query(None, description="process_reminders or process_recurring"),
):
    return JobRunService(db).list_logs(limit=limit, job_type=type)
