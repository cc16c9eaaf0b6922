"""Pydantic schemas for API requests and responses.

Sub-modules:
- employee: Employee directory schemas
- reminder: Reminder type, reminder and dispatch log schemas
- recurring: Recurring definition schemas
- jobs: Batch job and email settings schemas
- common: Shared response shapes
"""
from .common import ActionResult
from .employee import EmployeeCreate, EmployeeOut, EmployeeUpdate
from .jobs import CronJobLogOut, EmailSettingsOut, EmailTestRequest, JobTriggerIn
from .recurring import RecurringReminderCreate, RecurringReminderOut, RecurringReminderUpdate
from .reminder import (
    BulkReminderCreate,
    BulkReminderItem,
    EmailTemplateIn,
    EmailTemplateOut,
    IntervalIn,
    RecipientConfigIn,
    RecipientConfigOut,
    ReminderCreate,
    ReminderDetailOut,
    ReminderLogOut,
    ReminderOut,
    ReminderTypeCreate,
    ReminderTypeOut,
    ReminderTypeUpdate,
    ReminderUpdate,
    SendNowOut,
)

__all__ = [
    "ActionResult",
    "BulkReminderCreate",
    "BulkReminderItem",
    "CronJobLogOut",
    "EmailSettingsOut",
    "EmailTemplateIn",
    "EmailTemplateOut",
    "EmailTestRequest",
    "EmployeeCreate",
    "EmployeeOut",
    "EmployeeUpdate",
    "IntervalIn",
    "JobTriggerIn",
    "RecipientConfigIn",
    "RecipientConfigOut",
    "RecurringReminderCreate",
    "RecurringReminderOut",
    "RecurringReminderUpdate",
    "ReminderCreate",
    "ReminderDetailOut",
    "ReminderLogOut",
    "ReminderOut",
    "ReminderTypeCreate",
    "ReminderTypeOut",
    "ReminderTypeUpdate",
    "ReminderUpdate",
    "SendNowOut",
]
