"""Batch job and email settings schemas."""
from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from reminderly.models.models import JobType


class JobTriggerIn(BaseModel):
    job_type: JobType


class CronJobLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_type: str
    trigger_type: str
    status: str
    details: dict[str, Any] = Field(default_factory=dict)
    result_data: dict[str, Any] | None = None
    executed_at: dt.datetime
    completed_at: dt.datetime | None = None


class EmailSettingsOut(BaseModel):
    api_key: str
    from_email: str
    from_name: str
    configured: bool


class EmailTestRequest(BaseModel):
    to: str = Field(..., min_length=3, max_length=255)
