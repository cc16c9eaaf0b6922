"""
Celery Tasks Module.

All tasks are registered with the Celery app.

Sub-modules:
- reminder_tasks: Daily due-reminder dispatch and recurring reminder runs
"""
from __future__ import annotations

from .reminder_tasks import (
    process_due_reminders,
    process_recurring_reminders,
)

__all__ = [
    "process_due_reminders",
    "process_recurring_reminders",
]
