"""Reminder type, reminder instance and dispatch log schemas."""
from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from reminderly.models.models import Priority, RecurrenceClass

# ----------------- Reminder types -----------------

class IntervalIn(BaseModel):
    days_before: int = Field(..., ge=0, le=3650, description="Days before the due date")


class EmailTemplateIn(BaseModel):
    subject_template: str = Field(..., min_length=1, max_length=500)
    body_template: str = Field(..., min_length=1)


class EmailTemplateOut(EmailTemplateIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


class RecipientConfigIn(BaseModel):
    notify_employee: bool = False
    notify_manager: bool = True
    notify_hr: bool = True
    additional_emails: list[str] = Field(default_factory=list)


class RecipientConfigOut(RecipientConfigIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ReminderTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    enabled: bool = True
    recurrence: RecurrenceClass | None = Field(
        None, description="Defaults to a guess from the name (birthday, anniversary, otherwise one-off)"
    )


class ReminderTypeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    enabled: bool | None = None
    recurrence: RecurrenceClass | None = None


class ReminderTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    enabled: bool
    recurrence: str
    intervals: list[int]
    email_template: EmailTemplateOut | None = None
    recipient_config: RecipientConfigOut | None = None


# ----------------- Reminders -----------------

class ReminderCreate(BaseModel):
    employee_id: int
    reminder_type_id: int
    due_date: dt.date
    notes: str | None = None
    priority: Priority = Priority.NORMAL


class BulkReminderItem(BaseModel):
    reminder_type_id: int
    due_date: dt.date
    notes: str | None = None
    priority: Priority = Priority.NORMAL


class BulkReminderCreate(BaseModel):
    """Several reminders for one employee in one request."""
    employee_id: int
    reminders: list[BulkReminderItem] = Field(..., min_length=1, max_length=100)


class ReminderUpdate(BaseModel):
    due_date: dt.date | None = None
    notes: str | None = None
    priority: Priority | None = None
    reminder_type_id: int | None = None


class ReminderLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    days_before: int
    cycle_due_date: dt.date
    recipients: list[str]
    status: str
    trigger_type: str
    reminder_type: str | None = None
    message_ids: list[str] = Field(default_factory=list)
    error: str | None = None
    sent_at: dt.datetime


class ReminderOut(BaseModel):
    id: int
    employee_id: int
    employee_name: str
    employee_code: str
    department: str | None = None
    reminder_type_id: int
    reminder_type: str
    due_date: dt.date
    next_due_date: dt.date
    days_remaining: int
    status: Literal["pending", "sent", "completed"]
    priority: str
    source: str
    notes: str | None = None
    completed_at: dt.datetime | None = None
    created_at: dt.datetime | None = None


class ReminderDetailOut(ReminderOut):
    logs: list[ReminderLogOut] = Field(default_factory=list)


class SendNowOut(BaseModel):
    success: bool
    status: str
    days_before: int | None = None
    recipients: list[str] = Field(default_factory=list)
    reason: str | None = None
    error: str | None = None
