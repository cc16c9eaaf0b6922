"""Employee schemas."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class EmployeeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str | None = Field(None, max_length=255)
    position: str | None = Field(None, max_length=120)
    department: str | None = Field(None, max_length=120)
    manager_email: str | None = Field(None, max_length=255)
    hr_email: str | None = Field(None, max_length=255)
    birthday: dt.date | None = None
    work_anniversary: dt.date | None = None


class EmployeeCreate(EmployeeBase):
    employee_id: str = Field(..., min_length=1, max_length=50, description="HR employee code")


class EmployeeUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    employee_id: str | None = Field(None, min_length=1, max_length=50)
    name: str | None = Field(None, min_length=1, max_length=120)
    email: str | None = Field(None, max_length=255)
    position: str | None = Field(None, max_length=120)
    department: str | None = Field(None, max_length=120)
    manager_email: str | None = Field(None, max_length=255)
    hr_email: str | None = Field(None, max_length=255)
    birthday: dt.date | None = None
    work_anniversary: dt.date | None = None


class EmployeeOut(EmployeeBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str
    created_at: dt.datetime | None = None
