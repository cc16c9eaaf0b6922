"""Due-reminder computation and dispatch."""
from reminderly.services.reminders.dispatch import DispatchEngine, EmailSender
from reminderly.services.reminders.recurrence import RecurrenceAdvancer, next_due_date_for
from reminderly.services.reminders.results import DispatchResult, DispatchStatus, InstanceOutcome, RecurrenceResult
from reminderly.services.reminders.store import ReminderStore, SqlReminderStore

__all__ = [
    "DispatchEngine",
    "DispatchResult",
    "DispatchStatus",
    "EmailSender",
    "InstanceOutcome",
    "RecurrenceAdvancer",
    "RecurrenceResult",
    "ReminderStore",
    "SqlReminderStore",
    "next_due_date_for",
]
