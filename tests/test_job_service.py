import datetime as dt

import pytest

from conftest import FakeSender
from reminderly.core.exceptions import JobAlreadyRunningError, UnknownJobTypeError
from reminderly.models import models
from reminderly.services.job_service import JobRunService, parse_job_type

TODAY = dt.date(2025, 6, 1)


def _service(db_session, sender=None):
    sender = sender or FakeSender()
    return JobRunService(db_session, sender_factory=lambda: sender, today=TODAY)


def test_dispatch_run_is_logged(db_session, make_employee, make_reminder_type, make_reminder):
    make_reminder(make_employee(), make_reminder_type(), TODAY + dt.timedelta(days=7))
    sender = FakeSender()

    summary = _service(db_session, sender).run_dispatch()

    assert summary["success"]
    assert summary["job_type"] == "process_reminders"
    assert summary["trigger_type"] == "scheduled"
    assert summary["stats"] == {"sent": 1, "failed": 0, "skipped": 0}
    [run] = _service(db_session).list_logs()
    assert run.status == "completed"
    assert run.completed_at is not None
    assert run.result_data["stats"]["sent"] == 1


def test_recurring_run_is_logged(db_session, make_employee, make_reminder_type):
    make_employee()
    reminder_type = make_reminder_type()
    db_session.add(
        models.RecurringReminder(
            name="Quarterly review",
            reminder_type_id=reminder_type.id,
            frequency="monthly",
            interval=3,
            next_due_date=TODAY,
        )
    )
    db_session.commit()

    summary = _service(db_session).run("process_recurring")

    assert summary["success"]
    assert summary["trigger_type"] == "manual"
    assert summary["stats"]["created"] == 1
    assert summary["details"]["processed"][0]["next_due_date"] == "2025-09-01"


def test_overlapping_run_is_rejected(db_session):
    db_session.add(models.CronJobLog(job_type="process_reminders", trigger_type="scheduled", status="started"))
    db_session.commit()

    with pytest.raises(JobAlreadyRunningError) as info:
        _service(db_session).run_dispatch()

    assert info.value.status_code == 409
    # The other job type is not blocked
    assert _service(db_session).run_recurring()["success"]


def test_stale_started_run_is_reclaimed(db_session):
    stale = models.CronJobLog(
        job_type="process_reminders",
        trigger_type="scheduled",
        status="started",
        executed_at=models.utcnow() - dt.timedelta(hours=3),
    )
    db_session.add(stale)
    db_session.commit()

    summary = _service(db_session).run_dispatch()

    assert summary["success"]
    db_session.refresh(stale)
    assert stale.status == "abandoned"


def test_crashing_job_is_recorded_as_failed(db_session):
    def broken_factory():
        raise RuntimeError("sender unavailable")

    summary = JobRunService(db_session, sender_factory=broken_factory, today=TODAY).run_dispatch()

    assert summary["success"] is False
    assert summary["error"] == "sender unavailable"
    [run] = _service(db_session).list_logs()
    assert run.status == "failed"


def test_list_logs_filters_by_type(db_session):
    service = _service(db_session)
    service.run_dispatch()
    service.run_recurring()

    assert [log.job_type for log in service.list_logs(job_type="process_recurring")] == ["process_recurring"]
    assert len(service.list_logs(limit=1)) == 1


def test_unknown_job_type():
    with pytest.raises(UnknownJobTypeError):
        parse_job_type("rebuild_everything")
