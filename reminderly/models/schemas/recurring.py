"""Recurring reminder definition schemas."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from reminderly.models.models import Frequency


class RecurringReminderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    reminder_type_id: int
    frequency: Frequency = Frequency.MONTHLY
    interval: int = Field(1, ge=1, le=100, description="Number of frequency units per cycle")
    next_due_date: dt.date
    enabled: bool = True


class RecurringReminderUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    reminder_type_id: int | None = None
    frequency: Frequency | None = None
    interval: int | None = Field(None, ge=1, le=100)
    next_due_date: dt.date | None = None
    enabled: bool | None = None


class RecurringReminderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    reminder_type_id: int
    frequency: str
    interval: int
    next_due_date: dt.date
    anchor_date: dt.date | None = None
    enabled: bool
    last_processed: dt.datetime | None = None
