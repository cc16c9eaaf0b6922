"""Recurring reminder definitions CRUD."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from reminderly.core.exceptions import RecurringReminderNotFoundError, ReminderTypeNotFoundError
from reminderly.models.models import RecurringReminder, ReminderType
from reminderly.models.schemas import RecurringReminderCreate, RecurringReminderUpdate

logger = logging.getLogger(__name__)


class RecurringService:
    def __init__(self, db: Session):
        self.db = db

    def list_definitions(self) -> Sequence[RecurringReminder]:
        return self.db.scalars(
            select(RecurringReminder).order_by(RecurringReminder.next_due_date, RecurringReminder.id)
        ).all()

    def get_definition(self, recurring_id: int) -> RecurringReminder:
        definition = self.db.get(RecurringReminder, recurring_id)
        if definition is None:
            raise RecurringReminderNotFoundError(recurring_id)
        return definition

    def _require_type(self, reminder_type_id: int) -> None:
        if self.db.get(ReminderType, reminder_type_id) is None:
            raise ReminderTypeNotFoundError(reminder_type_id)

    def create_definition(self, data: RecurringReminderCreate) -> RecurringReminder:
        self._require_type(data.reminder_type_id)
        definition = RecurringReminder(
            name=data.name.strip(),
            reminder_type_id=data.reminder_type_id,
            frequency=data.frequency.value,
            interval=data.interval,
            next_due_date=data.next_due_date,
            anchor_date=data.next_due_date,
            enabled=data.enabled,
        )
        self.db.add(definition)
        self.db.commit()
        self.db.refresh(definition)
        logger.info("Created recurring reminder %s (%s)", definition.id, definition.name)
        return definition

    def update_definition(self, recurring_id: int, data: RecurringReminderUpdate) -> RecurringReminder:
        definition = self.get_definition(recurring_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("reminder_type_id") is not None:
            self._require_type(changes["reminder_type_id"])
            definition.reminder_type_id = changes["reminder_type_id"]
        if changes.get("name"):
            definition.name = changes["name"].strip()
        if changes.get("frequency") is not None:
            definition.frequency = changes["frequency"].value
        if changes.get("interval") is not None:
            definition.interval = changes["interval"]
        if changes.get("enabled") is not None:
            definition.enabled = changes["enabled"]
        if changes.get("next_due_date") is not None:
            # Rescheduling moves the day-of-month the schedule returns to
            definition.next_due_date = changes["next_due_date"]
            definition.anchor_date = changes["next_due_date"]
        self.db.commit()
        self.db.refresh(definition)
        return definition

    def delete_definition(self, recurring_id: int) -> None:
        definition = self.get_definition(recurring_id)
        self.db.delete(definition)
        self.db.commit()
        logger.info("Deleted recurring reminder %s", recurring_id)
