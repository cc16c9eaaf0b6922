from reminderly.models import models
from reminderly.workers.tasks import process_due_reminders, process_recurring_reminders


def test_due_task_runs_dispatch_job(db_session):
    summary = process_due_reminders.run()

    assert summary["success"] is True
    assert summary["job_type"] == "process_reminders"
    assert summary["trigger_type"] == "scheduled"


def test_recurring_task_skips_when_a_run_is_in_progress(db_session):
    db_session.add(models.CronJobLog(job_type="process_recurring", trigger_type="manual", status="started"))
    db_session.commit()

    summary = process_recurring_reminders.run()

    assert summary["skipped"] is True
    assert summary["success"] is False
