"""Metrics facade.

Service code should ONLY call the semantic helpers here so we can change backend freely.
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("metrics")

_EMAILS_SENT = Counter("reminder_emails_sent_total", "Reminder emails accepted by the email provider")
_EMAILS_FAILED = Counter("reminder_emails_failed_total", "Reminder emails the provider rejected or that timed out")
_DISPATCH_OUTCOMES = Counter(
    "reminder_dispatch_outcomes_total", "Per-reminder dispatch outcomes", ["status"]
)
_RECURRING_SPAWNED = Counter(
    "recurring_reminders_spawned_total", "Reminder instances created from recurring definitions"
)
_JOB_RUNS = Counter("reminder_job_runs_total", "Batch job runs", ["job_type", "status"])
_JOB_DURATION = Histogram(
    "reminder_job_duration_seconds",
    "Wall-clock duration of batch job runs",
    ["job_type"],
    buckets=(0.1, 0.5, 1, 2.5, 5, 10, 30, 60, 120, 300),
)


def email_sent():
    _EMAILS_SENT.inc()


def email_failed():
    _EMAILS_FAILED.inc()


def dispatch_outcome(status: str):
    _DISPATCH_OUTCOMES.labels(status=status).inc()


def recurring_spawned(count: int):
    if count:
        _RECURRING_SPAWNED.inc(count)


def job_run(job_type: str, status: str, duration_seconds: float | None = None):
    _JOB_RUNS.labels(job_type=job_type, status=status).inc()
    if duration_seconds is not None:
        _JOB_DURATION.labels(job_type=job_type).observe(duration_seconds)
    logger.debug("metric reminder_job_runs_total{job_type=%s,status=%s} += 1", job_type, status)
