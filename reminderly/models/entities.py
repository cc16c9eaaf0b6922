"""Typed entities consumed by the reminder engine.

The data store converts ORM rows into these frozen dataclasses at the
boundary, so engine code never touches lazy relationships or optional
one-to-one rows directly.
"""
from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field

from reminderly.models.models import Frequency, Priority, RecurrenceClass


class RecipientRole(str, enum.Enum):
    HR = "HR"
    MANAGER = "Manager"
    ADDITIONAL = "Additional"
    EMPLOYEE = "Employee"

    @property
    def label(self) -> str:
        """Salutation used for the ``{recipient}`` placeholder."""
        return {
            RecipientRole.HR: "HR Department",
            RecipientRole.MANAGER: "Manager",
            RecipientRole.ADDITIONAL: "Management Team",
            RecipientRole.EMPLOYEE: "Employee",
        }[self]

    @property
    def is_management(self) -> bool:
        return self is not RecipientRole.EMPLOYEE


@dataclass(frozen=True)
class Recipient:
    email: str
    display_name: str
    role: RecipientRole

    @property
    def is_management(self) -> bool:
        return self.role.is_management


@dataclass(frozen=True)
class MessageTemplate:
    subject: str
    body: str


@dataclass(frozen=True)
class RecipientPolicy:
    notify_employee: bool = False
    notify_manager: bool = True
    notify_hr: bool = True
    additional_emails: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReminderTypeConfig:
    id: int
    name: str
    enabled: bool
    recurrence: RecurrenceClass
    intervals: tuple[int, ...]
    template: MessageTemplate | None
    policy: RecipientPolicy | None


@dataclass(frozen=True)
class EmployeeContact:
    id: int
    name: str
    email: str | None = None
    manager_email: str | None = None
    hr_email: str | None = None
    birthday: dt.date | None = None
    work_anniversary: dt.date | None = None


@dataclass(frozen=True)
class ReminderInstance:
    id: int
    employee: EmployeeContact
    reminder_type: ReminderTypeConfig
    due_date: dt.date
    notes: str | None = None
    priority: Priority = Priority.NORMAL
    completed: bool = False


@dataclass(frozen=True)
class DispatchLogEntry:
    id: int
    reminder_id: int
    days_before: int
    cycle_due_date: dt.date
    recipients: tuple[str, ...]
    status: str
    sent_at: dt.datetime | None = None
    error: str | None = None


@dataclass(frozen=True)
class RecurringDefinition:
    id: int
    name: str
    reminder_type_id: int
    recurrence: RecurrenceClass
    frequency: Frequency
    interval: int
    next_due_date: dt.date
    anchor_date: dt.date | None = None
    enabled: bool = True


@dataclass(frozen=True)
class EmailMessage:
    recipients: tuple[Recipient, ...]
    subject: str
    html_body: str


@dataclass(frozen=True)
class SendResult:
    success: bool
    message_id: str | None = None
    error: str | None = None
    details: dict = field(default_factory=dict)
