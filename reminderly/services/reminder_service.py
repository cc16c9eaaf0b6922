"""Reminder instances: listing with computed status, CRUD, completion and manual send."""
from __future__ import annotations

import datetime as dt
import logging
from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, joinedload, selectinload

from reminderly.core.config import settings
from reminderly.core.exceptions import (
    EmployeeNotFoundError,
    ReminderAlreadyCompletedError,
    ReminderNotFoundError,
    ReminderTypeDisabledError,
    ReminderTypeNotFoundError,
)
from reminderly.models.models import (
    Employee,
    EmployeeReminder,
    LogStatus,
    RecurrenceClass,
    ReminderLog,
    ReminderSource,
    ReminderType,
    TriggerType,
    utcnow,
)
from reminderly.models.schemas import (
    BulkReminderCreate,
    ReminderCreate,
    ReminderDetailOut,
    ReminderLogOut,
    ReminderOut,
    ReminderUpdate,
)
from reminderly.services.reminders import DispatchEngine, EmailSender, InstanceOutcome, SqlReminderStore
from reminderly.services.reminders.dates import current_local_date, effective_due_date

logger = logging.getLogger(__name__)


def today_local() -> dt.date:
    return current_local_date(settings.REMINDER_TIMEZONE)


def reminder_status(reminder: EmployeeReminder, cycle_due_date: dt.date) -> str:
    """Status for the occurrence due on cycle_due_date; earlier annual cycles do not count."""
    if reminder.completed_at is not None:
        return "completed"
    if any(
        log.status == LogStatus.SENT.value and log.cycle_due_date == cycle_due_date for log in reminder.logs
    ):
        return "sent"
    return "pending"


def to_out(reminder: EmployeeReminder, today: dt.date, with_logs: bool = False) -> ReminderOut:
    recurrence = RecurrenceClass(reminder.reminder_type.recurrence)
    next_due = effective_due_date(reminder.due_date, recurrence, today)
    fields = dict(
        id=reminder.id,
        employee_id=reminder.employee_id,
        employee_name=reminder.employee.name,
        employee_code=reminder.employee.employee_id,
        department=reminder.employee.department,
        reminder_type_id=reminder.reminder_type_id,
        reminder_type=reminder.reminder_type.name,
        due_date=reminder.due_date,
        next_due_date=next_due,
        days_remaining=(next_due - today).days,
        status=reminder_status(reminder, next_due),
        priority=reminder.priority,
        source=reminder.source,
        notes=reminder.notes,
        completed_at=reminder.completed_at,
        created_at=reminder.created_at,
    )
    if with_logs:
        return ReminderDetailOut(logs=[ReminderLogOut.model_validate(log) for log in reminder.logs], **fields)
    return ReminderOut(**fields)


class ReminderService:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return select(EmployeeReminder).options(
            joinedload(EmployeeReminder.employee),
            joinedload(EmployeeReminder.reminder_type),
            selectinload(EmployeeReminder.logs),
        )

    def list_reminders(
        self,
        reminder_type_id: int | None = None,
        search: str | None = None,
        include_completed: bool = True,
        today: dt.date | None = None,
    ) -> list[ReminderOut]:
        """Reminders ordered by their next occurrence."""
        today = today or today_local()
        query = self._query().join(EmployeeReminder.employee)
        if reminder_type_id is not None:
            query = query.where(EmployeeReminder.reminder_type_id == reminder_type_id)
        if not include_completed:
            query = query.where(EmployeeReminder.completed_at.is_(None))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Employee.name.ilike(pattern),
                    Employee.employee_id.ilike(pattern),
                    Employee.department.ilike(pattern),
                    EmployeeReminder.notes.ilike(pattern),
                )
            )
        rows = self.db.scalars(query).unique().all()
        items = [to_out(row, today) for row in rows]
        return sorted(items, key=lambda item: (item.next_due_date, item.id))

    def get_reminder(self, reminder_id: int) -> EmployeeReminder:
        reminder = self.db.scalars(self._query().where(EmployeeReminder.id == reminder_id)).unique().first()
        if reminder is None:
            raise ReminderNotFoundError(reminder_id)
        return reminder

    def get_detail(self, reminder_id: int, today: dt.date | None = None) -> ReminderOut:
        return to_out(self.get_reminder(reminder_id), today or today_local(), with_logs=True)

    def _active_type(self, reminder_type_id: int) -> ReminderType:
        reminder_type = self.db.get(ReminderType, reminder_type_id)
        if reminder_type is None:
            raise ReminderTypeNotFoundError(reminder_type_id)
        if not reminder_type.enabled:
            raise ReminderTypeDisabledError(reminder_type.name)
        return reminder_type

    def _employee(self, employee_id: int) -> Employee:
        employee = self.db.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    def create_reminder(self, data: ReminderCreate) -> EmployeeReminder:
        self._employee(data.employee_id)
        self._active_type(data.reminder_type_id)
        reminder = EmployeeReminder(
            employee_id=data.employee_id,
            reminder_type_id=data.reminder_type_id,
            due_date=data.due_date,
            notes=data.notes,
            priority=data.priority.value,
            source=ReminderSource.MANUAL.value,
        )
        self.db.add(reminder)
        self.db.commit()
        logger.info("Created reminder %s for employee %s", reminder.id, data.employee_id)
        return self.get_reminder(reminder.id)

    def create_bulk(self, data: BulkReminderCreate) -> list[EmployeeReminder]:
        """Create every reminder in the batch or none of them."""
        self._employee(data.employee_id)
        created = []
        for item in data.reminders:
            self._active_type(item.reminder_type_id)
            reminder = EmployeeReminder(
                employee_id=data.employee_id,
                reminder_type_id=item.reminder_type_id,
                due_date=item.due_date,
                notes=item.notes,
                priority=item.priority.value,
                source=ReminderSource.BULK.value,
            )
            self.db.add(reminder)
            created.append(reminder)
        self.db.commit()
        logger.info("Created %s reminders for employee %s", len(created), data.employee_id)
        return [self.get_reminder(reminder.id) for reminder in created]

    def update_reminder(self, reminder_id: int, data: ReminderUpdate) -> EmployeeReminder:
        reminder = self.get_reminder(reminder_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("reminder_type_id") is not None and changes["reminder_type_id"] != reminder.reminder_type_id:
            reminder.reminder_type = self._active_type(changes["reminder_type_id"])
        if changes.get("due_date") is not None:
            reminder.due_date = changes["due_date"]
        if "notes" in changes:
            reminder.notes = changes["notes"]
        if changes.get("priority") is not None:
            reminder.priority = changes["priority"].value
        self.db.commit()
        return self.get_reminder(reminder_id)

    def delete_reminder(self, reminder_id: int) -> None:
        reminder = self.get_reminder(reminder_id)
        self.db.delete(reminder)
        self.db.commit()
        logger.info("Deleted reminder %s", reminder_id)

    def complete_reminder(self, reminder_id: int) -> EmployeeReminder:
        reminder = self.get_reminder(reminder_id)
        if reminder.completed_at is not None:
            raise ReminderAlreadyCompletedError(reminder_id)
        reminder.completed_at = utcnow()
        self.db.commit()
        logger.info("Reminder %s marked complete", reminder_id)
        return reminder

    def list_logs(self, reminder_id: int) -> Sequence[ReminderLog]:
        self.get_reminder(reminder_id)
        return self.db.scalars(
            select(ReminderLog)
            .where(ReminderLog.employee_reminder_id == reminder_id)
            .order_by(ReminderLog.sent_at.desc(), ReminderLog.id.desc())
        ).all()

    def send_now(self, reminder_id: int, sender: EmailSender, today: dt.date | None = None) -> InstanceOutcome:
        engine = DispatchEngine(
            SqlReminderStore(self.db),
            sender,
            today or today_local(),
            date_format=settings.REMINDER_DATE_FORMAT,
            trigger_type=TriggerType.MANUAL.value,
        )
        return engine.send_now(reminder_id)
