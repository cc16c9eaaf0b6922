"""Structured summaries returned by the batch jobs."""
from __future__ import annotations

import datetime as dt
import enum
from dataclasses import asdict, dataclass, field
from typing import Any


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class DispatchStatus(str, enum.Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class InstanceOutcome:
    reminder_id: int
    status: DispatchStatus
    reason: str | None = None
    days_before: int | None = None
    recipients: list[str] = field(default_factory=list)
    error: str | None = None
    timestamp: dt.datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["status"] = self.status.value
        payload["timestamp"] = self.timestamp.isoformat()
        return payload


@dataclass
class DispatchResult:
    today: dt.date
    success: bool = True
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    outcomes: list[InstanceOutcome] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    error: str | None = None

    def record(self, outcome: InstanceOutcome) -> InstanceOutcome:
        self.outcomes.append(outcome)
        if outcome.status == DispatchStatus.SENT:
            self.sent += 1
        elif outcome.status == DispatchStatus.FAILED:
            self.failed += 1
            self.errors.append(f"Reminder {outcome.reminder_id}: {outcome.error or outcome.reason}")
        else:
            self.skipped += 1
        return outcome

    def abort(self, message: str) -> None:
        self.success = False
        self.error = message
        self.errors.append(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "today": self.today.isoformat(),
            "stats": {"sent": self.sent, "failed": self.failed, "skipped": self.skipped},
            "reminders": [outcome.to_dict() for outcome in self.outcomes],
            "errors": list(self.errors),
            "error": self.error,
        }


@dataclass
class RecurrenceResult:
    today: dt.date
    success: bool = True
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
    details: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    def add_error(self, kind: str, recurring_id: int | None, message: str, **context: Any) -> None:
        self.errors.append(
            {
                "type": kind,
                "recurring_reminder_id": recurring_id,
                "error": message,
                "timestamp": _now().isoformat(),
                **context,
            }
        )

    def abort(self, message: str) -> None:
        self.success = False
        self.error = message
        self.add_error("fatal", None, message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "today": self.today.isoformat(),
            "stats": {
                "processed": self.processed,
                "created": self.created,
                "updated": self.updated,
                "skipped": self.skipped,
                "errors": len(self.errors),
            },
            "details": {"errors": list(self.errors), "processed": list(self.details)},
            "error": self.error,
        }
