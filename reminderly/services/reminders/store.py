"""Data-store boundary for the reminder engine.

``ReminderStore`` is the contract the engine depends on; ``SqlReminderStore``
implements it on a SQLAlchemy session and narrows ORM rows into the typed
entities from ``reminderly.models.entities``. Every write commits on its own
so a later failure never rolls back logs that were already recorded.
"""
from __future__ import annotations

import datetime as dt
import functools
import logging
from typing import Callable, Protocol, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from reminderly.core.exceptions import DataStoreError, ReminderNotFoundError
from reminderly.models import models
from reminderly.models.entities import (
    DispatchLogEntry,
    EmployeeContact,
    MessageTemplate,
    RecipientPolicy,
    RecurringDefinition,
    ReminderInstance,
    ReminderTypeConfig,
)
from reminderly.services.reminders.intervals import normalize_intervals

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReminderStore(Protocol):
    def list_enabled_reminder_types(self) -> list[ReminderTypeConfig]: ...

    def list_pending_reminders(self) -> list[ReminderInstance]: ...

    def get_reminder(self, reminder_id: int) -> ReminderInstance: ...

    def list_logs(self, reminder_id: int) -> list[DispatchLogEntry]: ...

    def has_successful_dispatch(
        self, reminder_id: int, days_before: int, cycle_due_date: dt.date
    ) -> bool: ...

    def claim_dispatch(
        self,
        reminder: ReminderInstance,
        days_before: int,
        cycle_due_date: dt.date,
        recipients: list[str],
        trigger_type: str,
    ) -> int | None: ...

    def finish_dispatch(
        self, log_id: int, status: str, recipients: list[str], message_ids: list[str], error: str | None
    ) -> None: ...

    def record_failed_dispatch(
        self,
        reminder: ReminderInstance,
        days_before: int,
        cycle_due_date: dt.date,
        recipients: list[str],
        error: str,
        trigger_type: str,
    ) -> int: ...

    def mark_completed(self, reminder_id: int, completed_at: dt.datetime) -> bool: ...

    def list_due_recurring(self, today: dt.date) -> list[RecurringDefinition]: ...

    def list_employees(self) -> list[EmployeeContact]: ...

    def spawn_reminder(self, definition: RecurringDefinition, employee: EmployeeContact, due_date: dt.date) -> int | None: ...

    def advance_recurring(self, recurring_id: int, next_due_date: dt.date, processed_at: dt.datetime) -> None: ...


def _guarded(operation: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Translate SQLAlchemy failures into DataStoreError after rolling back."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(self: SqlReminderStore, *args, **kwargs) -> T:
            try:
                return func(self, *args, **kwargs)
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.error("Data store failure during %s: %s", operation, exc)
                raise DataStoreError(operation, str(exc)) from exc

        return wrapper

    return decorator


def to_type_config(row: models.ReminderType) -> ReminderTypeConfig:
    template = row.email_template
    config = row.recipient_config
    return ReminderTypeConfig(
        id=row.id,
        name=row.name,
        enabled=bool(row.enabled),
        recurrence=models.RecurrenceClass(row.recurrence or models.RecurrenceClass.ONE_OFF.value),
        intervals=normalize_intervals(i.days_before for i in row.intervals),
        template=MessageTemplate(template.subject_template, template.body_template) if template else None,
        policy=RecipientPolicy(
            notify_employee=bool(config.notify_employee),
            notify_manager=bool(config.notify_manager),
            notify_hr=bool(config.notify_hr),
            additional_emails=tuple(config.additional_emails or ()),
        )
        if config
        else None,
    )


def to_contact(row: models.Employee) -> EmployeeContact:
    return EmployeeContact(
        id=row.id,
        name=row.name,
        email=row.email,
        manager_email=row.manager_email,
        hr_email=row.hr_email,
        birthday=row.birthday,
        work_anniversary=row.work_anniversary,
    )


def to_instance(row: models.EmployeeReminder) -> ReminderInstance:
    return ReminderInstance(
        id=row.id,
        employee=to_contact(row.employee),
        reminder_type=to_type_config(row.reminder_type),
        due_date=row.due_date,
        notes=row.notes,
        priority=models.Priority(row.priority or models.Priority.NORMAL.value),
        completed=row.completed_at is not None,
    )


def to_log_entry(row: models.ReminderLog) -> DispatchLogEntry:
    return DispatchLogEntry(
        id=row.id,
        reminder_id=row.employee_reminder_id,
        days_before=row.days_before,
        cycle_due_date=row.cycle_due_date,
        recipients=tuple(row.recipients or ()),
        status=row.status,
        sent_at=row.sent_at,
        error=row.error,
    )


def _type_loader():
    return (
        selectinload(models.ReminderType.intervals),
        selectinload(models.ReminderType.email_template),
        selectinload(models.ReminderType.recipient_config),
    )


class SqlReminderStore:
    """ReminderStore backed by the application database."""

    def __init__(self, db: Session):
        self.db = db

    def _reminder_query(self):
        reminder_type = selectinload(models.EmployeeReminder.reminder_type)
        return select(models.EmployeeReminder).options(
            selectinload(models.EmployeeReminder.employee),
            reminder_type.selectinload(models.ReminderType.intervals),
            reminder_type.selectinload(models.ReminderType.email_template),
            reminder_type.selectinload(models.ReminderType.recipient_config),
        )

    @_guarded("list reminder types")
    def list_enabled_reminder_types(self) -> list[ReminderTypeConfig]:
        rows = self.db.scalars(
            select(models.ReminderType)
            .options(*_type_loader())
            .where(models.ReminderType.enabled.is_(True))
            .order_by(models.ReminderType.name)
        ).all()
        return [to_type_config(row) for row in rows]

    @_guarded("list pending reminders")
    def list_pending_reminders(self) -> list[ReminderInstance]:
        rows = self.db.scalars(
            self._reminder_query()
            .where(models.EmployeeReminder.completed_at.is_(None))
            .order_by(models.EmployeeReminder.due_date, models.EmployeeReminder.id)
        ).all()
        return [to_instance(row) for row in rows]

    @_guarded("load reminder")
    def get_reminder(self, reminder_id: int) -> ReminderInstance:
        row = self.db.scalar(self._reminder_query().where(models.EmployeeReminder.id == reminder_id))
        if row is None:
            raise ReminderNotFoundError(reminder_id)
        return to_instance(row)

    @_guarded("list dispatch logs")
    def list_logs(self, reminder_id: int) -> list[DispatchLogEntry]:
        rows = self.db.scalars(
            select(models.ReminderLog)
            .where(models.ReminderLog.employee_reminder_id == reminder_id)
            .order_by(models.ReminderLog.sent_at.desc(), models.ReminderLog.id.desc())
        ).all()
        return [to_log_entry(row) for row in rows]

    @_guarded("check dispatch history")
    def has_successful_dispatch(self, reminder_id: int, days_before: int, cycle_due_date: dt.date) -> bool:
        found = self.db.scalar(
            select(models.ReminderLog.id).where(
                models.ReminderLog.employee_reminder_id == reminder_id,
                models.ReminderLog.days_before == days_before,
                models.ReminderLog.cycle_due_date == cycle_due_date,
                models.ReminderLog.status == models.LogStatus.SENT.value,
            )
        )
        return found is not None

    @_guarded("claim dispatch")
    def claim_dispatch(
        self,
        reminder: ReminderInstance,
        days_before: int,
        cycle_due_date: dt.date,
        recipients: list[str],
        trigger_type: str,
    ) -> int | None:
        """Insert an in-flight log row; None when another row already holds the slot."""
        log = models.ReminderLog(
            employee_reminder_id=reminder.id,
            days_before=days_before,
            cycle_due_date=cycle_due_date,
            recipients=list(recipients),
            status=models.LogStatus.SENDING.value,
            trigger_type=trigger_type,
            reminder_type=reminder.reminder_type.name,
        )
        self.db.add(log)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                "Dispatch slot already taken | reminder=%s days_before=%s cycle=%s",
                reminder.id,
                days_before,
                cycle_due_date,
            )
            return None
        return log.id

    @_guarded("finish dispatch")
    def finish_dispatch(
        self, log_id: int, status: str, recipients: list[str], message_ids: list[str], error: str | None
    ) -> None:
        log = self.db.get(models.ReminderLog, log_id)
        if log is None:
            raise DataStoreError("finish dispatch", f"log {log_id} disappeared")
        log.status = status
        log.recipients = list(recipients)
        log.message_ids = list(message_ids)
        log.error = error
        log.sent_at = models.utcnow()
        self.db.commit()

    @_guarded("record failed dispatch")
    def record_failed_dispatch(
        self,
        reminder: ReminderInstance,
        days_before: int,
        cycle_due_date: dt.date,
        recipients: list[str],
        error: str,
        trigger_type: str,
    ) -> int:
        log = models.ReminderLog(
            employee_reminder_id=reminder.id,
            days_before=days_before,
            cycle_due_date=cycle_due_date,
            recipients=list(recipients),
            status=models.LogStatus.FAILED.value,
            trigger_type=trigger_type,
            reminder_type=reminder.reminder_type.name,
            error=error,
        )
        self.db.add(log)
        self.db.commit()
        return log.id

    @_guarded("mark reminder completed")
    def mark_completed(self, reminder_id: int, completed_at: dt.datetime) -> bool:
        """Set the completion marker; False if it was already set."""
        row = self.db.get(models.EmployeeReminder, reminder_id)
        if row is None:
            raise ReminderNotFoundError(reminder_id)
        if row.completed_at is not None:
            return False
        row.completed_at = completed_at
        self.db.commit()
        return True

    @_guarded("list recurring reminders")
    def list_due_recurring(self, today: dt.date) -> list[RecurringDefinition]:
        rows = self.db.scalars(
            select(models.RecurringReminder)
            .options(selectinload(models.RecurringReminder.reminder_type))
            .where(
                models.RecurringReminder.enabled.is_(True),
                models.RecurringReminder.next_due_date <= today,
            )
            .order_by(models.RecurringReminder.next_due_date, models.RecurringReminder.id)
        ).all()
        definitions = []
        for row in rows:
            reminder_type = row.reminder_type
            definitions.append(
                RecurringDefinition(
                    id=row.id,
                    name=row.name,
                    reminder_type_id=row.reminder_type_id,
                    recurrence=models.RecurrenceClass(reminder_type.recurrence),
                    frequency=models.Frequency(row.frequency),
                    interval=row.interval,
                    next_due_date=row.next_due_date,
                    anchor_date=row.anchor_date,
                    enabled=bool(row.enabled) and bool(reminder_type.enabled),
                )
            )
        return definitions

    @_guarded("list employees")
    def list_employees(self) -> list[EmployeeContact]:
        rows = self.db.scalars(select(models.Employee).order_by(models.Employee.id)).all()
        return [to_contact(row) for row in rows]

    @_guarded("spawn reminder")
    def spawn_reminder(
        self, definition: RecurringDefinition, employee: EmployeeContact, due_date: dt.date
    ) -> int | None:
        """Create the cycle's reminder for one employee; None if it already exists."""
        reminder = models.EmployeeReminder(
            employee_id=employee.id,
            reminder_type_id=definition.reminder_type_id,
            due_date=due_date,
            notes=f"Auto-generated from recurring reminder: {definition.name}",
            source=models.ReminderSource.RECURRING.value,
            recurring_reminder_id=definition.id,
        )
        self.db.add(reminder)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return None
        return reminder.id

    @_guarded("advance recurring reminder")
    def advance_recurring(self, recurring_id: int, next_due_date: dt.date, processed_at: dt.datetime) -> None:
        row = self.db.get(models.RecurringReminder, recurring_id)
        if row is None:
            raise DataStoreError("advance recurring reminder", f"recurring reminder {recurring_id} disappeared")
        if row.anchor_date is None:
            row.anchor_date = row.next_due_date
        row.next_due_date = next_due_date
        row.last_processed = processed_at
        self.db.commit()
