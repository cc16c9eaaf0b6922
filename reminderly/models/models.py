from __future__ import annotations

import datetime as dt
import enum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from reminderly.db.base_class import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class RecurrenceClass(str, enum.Enum):
    """How a reminder type interprets the due date of its instances."""
    ONE_OFF = "one_off"
    BIRTHDAY = "birthday"
    WORK_ANNIVERSARY = "work_anniversary"

    @property
    def is_annual(self) -> bool:
        return self in (RecurrenceClass.BIRTHDAY, RecurrenceClass.WORK_ANNIVERSARY)

    @classmethod
    def infer(cls, type_name: str) -> RecurrenceClass:
        """Guess the class from a reminder type's display name."""
        lowered = type_name.lower()
        if "birthday" in lowered:
            return cls.BIRTHDAY
        if "anniversary" in lowered:
            return cls.WORK_ANNIVERSARY
        return cls.ONE_OFF


class Frequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Priority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class ReminderSource(str, enum.Enum):
    MANUAL = "manual"
    BULK = "bulk"
    RECURRING = "recurring"


class LogStatus(str, enum.Enum):
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class JobType(str, enum.Enum):
    PROCESS_REMINDERS = "process_reminders"
    PROCESS_RECURRING = "process_recurring"


class TriggerType(str, enum.Enum):
    SCHEDULED = "scheduled"
    MANUAL = "manual"


class JobStatus(str, enum.Enum):
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"
    ABANDONED = "abandoned"


class Employee(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    position: Mapped[str | None] = mapped_column(String(120), nullable=True)
    department: Mapped[str | None] = mapped_column(String(120), nullable=True)
    manager_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    hr_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    birthday: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    work_anniversary: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    reminders: Mapped[list[EmployeeReminder]] = relationship(
        "EmployeeReminder",
        back_populates="employee",
        cascade="all, delete-orphan",
    )


class ReminderType(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    recurrence: Mapped[str] = mapped_column(String(30), default=RecurrenceClass.ONE_OFF.value)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    intervals: Mapped[list[ReminderInterval]] = relationship(
        "ReminderInterval",
        back_populates="reminder_type",
        cascade="all, delete-orphan",
        order_by="ReminderInterval.days_before.desc()",
    )
    email_template: Mapped[EmailTemplate | None] = relationship(
        "EmailTemplate",
        back_populates="reminder_type",
        cascade="all, delete-orphan",
        uselist=False,
    )
    recipient_config: Mapped[RecipientConfig | None] = relationship(
        "RecipientConfig",
        back_populates="reminder_type",
        cascade="all, delete-orphan",
        uselist=False,
    )
    reminders: Mapped[list[EmployeeReminder]] = relationship(
        "EmployeeReminder",
        back_populates="reminder_type",
        cascade="all, delete-orphan",
    )
    recurring_reminders: Mapped[list[RecurringReminder]] = relationship(
        "RecurringReminder",
        back_populates="reminder_type",
        cascade="all, delete-orphan",
    )


class ReminderInterval(Base):
    __table_args__ = (
        UniqueConstraint("reminder_type_id", "days_before", name="uq_reminder_interval_days"),
        CheckConstraint("days_before >= 0", name="ck_reminder_interval_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    reminder_type_id: Mapped[int] = mapped_column(ForeignKey("reminder_types.id", ondelete="CASCADE"), index=True)
    days_before: Mapped[int] = mapped_column(Integer, nullable=False)

    reminder_type: Mapped[ReminderType] = relationship("ReminderType", back_populates="intervals")


class EmailTemplate(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    reminder_type_id: Mapped[int] = mapped_column(
        ForeignKey("reminder_types.id", ondelete="CASCADE"), unique=True
    )
    subject_template: Mapped[str] = mapped_column(String(500), nullable=False)
    body_template: Mapped[str] = mapped_column(Text, nullable=False)

    reminder_type: Mapped[ReminderType] = relationship("ReminderType", back_populates="email_template")


class RecipientConfig(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    reminder_type_id: Mapped[int] = mapped_column(
        ForeignKey("reminder_types.id", ondelete="CASCADE"), unique=True
    )
    notify_employee: Mapped[bool] = mapped_column(Boolean, default=False)
    notify_manager: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_hr: Mapped[bool] = mapped_column(Boolean, default=True)
    additional_emails: Mapped[list] = mapped_column(JSON, default=list)

    reminder_type: Mapped[ReminderType] = relationship("ReminderType", back_populates="recipient_config")


class EmployeeReminder(Base):
    __table_args__ = (
        # Recurring spawns are unique per cycle; manual rows (NULL link) are unconstrained
        UniqueConstraint(
            "recurring_reminder_id", "employee_id", "due_date", name="uq_employee_reminder_recurring_cycle"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), index=True)
    reminder_type_id: Mapped[int] = mapped_column(ForeignKey("reminder_types.id", ondelete="CASCADE"), index=True)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(20), default=Priority.NORMAL.value)
    source: Mapped[str] = mapped_column(String(20), default=ReminderSource.MANUAL.value)
    recurring_reminder_id: Mapped[int | None] = mapped_column(
        ForeignKey("recurring_reminders.id", ondelete="SET NULL"), nullable=True
    )
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    employee: Mapped[Employee] = relationship("Employee", back_populates="reminders")
    reminder_type: Mapped[ReminderType] = relationship("ReminderType", back_populates="reminders")
    logs: Mapped[list[ReminderLog]] = relationship(
        "ReminderLog",
        back_populates="reminder",
        cascade="all, delete-orphan",
        order_by="ReminderLog.sent_at.desc()",
    )


_ACTIVE_LOG_STATUSES = "status IN ('sending', 'sent')"


class ReminderLog(Base):
    """One dispatch attempt for a (reminder, interval, cycle) triple.

    ``cycle_due_date`` is the occurrence the notice was about: the stored due
    date for one-off reminders, this year's date for birthdays and
    anniversaries. The partial unique index allows any number of failed
    attempts but at most one row that is in flight or delivered per cycle,
    which is what makes concurrent dispatch runs unable to double-send.
    """
    __table_args__ = (
        Index(
            "uq_reminder_log_active_interval",
            "employee_reminder_id",
            "days_before",
            "cycle_due_date",
            unique=True,
            sqlite_where=text(_ACTIVE_LOG_STATUSES),
            postgresql_where=text(_ACTIVE_LOG_STATUSES),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_reminder_id: Mapped[int] = mapped_column(
        ForeignKey("employee_reminders.id", ondelete="CASCADE"), index=True
    )
    days_before: Mapped[int] = mapped_column(Integer, nullable=False)
    cycle_due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    recipients: Mapped[list] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(20), default=LogStatus.SENDING.value)
    trigger_type: Mapped[str] = mapped_column(String(20), default=TriggerType.SCHEDULED.value)
    reminder_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    message_ids: Mapped[list] = mapped_column(JSON, default=list)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    reminder: Mapped[EmployeeReminder] = relationship("EmployeeReminder", back_populates="logs")


class RecurringReminder(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    reminder_type_id: Mapped[int] = mapped_column(ForeignKey("reminder_types.id", ondelete="CASCADE"), index=True)
    frequency: Mapped[str] = mapped_column(String(20), default=Frequency.MONTHLY.value)
    interval: Mapped[int] = mapped_column(Integer, default=1)
    next_due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    # Day-of-month to return to after short months clamp the schedule
    anchor_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    last_processed: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    reminder_type: Mapped[ReminderType] = relationship("ReminderType", back_populates="recurring_reminders")


_STARTED_JOB = "status = 'started'"


class CronJobLog(Base):
    __table_args__ = (
        Index(
            "uq_cron_job_log_single_started",
            "job_type",
            unique=True,
            sqlite_where=text(_STARTED_JOB),
            postgresql_where=text(_STARTED_JOB),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    job_type: Mapped[str] = mapped_column(String(50), index=True)
    trigger_type: Mapped[str] = mapped_column(String(20), default=TriggerType.SCHEDULED.value)
    status: Mapped[str] = mapped_column(String(20), default=JobStatus.STARTED.value)
    details: Mapped[dict] = mapped_column(JSON, default=dict)
    result_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    executed_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
