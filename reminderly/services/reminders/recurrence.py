"""Spawn reminders from recurring definitions and roll their schedule forward."""
from __future__ import annotations

import datetime as dt
import logging

from reminderly import metrics
from reminderly.core.exceptions import DataStoreError
from reminderly.models.entities import RecurringDefinition
from reminderly.models.models import utcnow
from reminderly.services.reminders.dates import advance
from reminderly.services.reminders.results import RecurrenceResult
from reminderly.services.reminders.store import ReminderStore

logger = logging.getLogger(__name__)


def next_due_date_for(definition: RecurringDefinition, start: dt.date | None = None) -> dt.date:
    """One cycle after ``start`` (defaults to the definition's current due date).

    Birthday and anniversary definitions always move in whole years so a
    Feb 29 anchor lands on Feb 28 in common years and returns to Feb 29 in
    leap years. Month-based schedules keep the anchor's day-of-month and
    clamp it to the end of shorter months.
    """
    current = start or definition.next_due_date
    return advance(
        current,
        definition.frequency,
        definition.interval,
        anchor=definition.anchor_date or definition.next_due_date,
        annual=definition.recurrence.is_annual,
    )


def catch_up(definition: RecurringDefinition, today: dt.date) -> dt.date:
    """First cycle date strictly after ``today``."""
    value = next_due_date_for(definition)
    while value <= today:
        value = next_due_date_for(definition, value)
    return value


class RecurrenceAdvancer:
    def __init__(self, store: ReminderStore, today: dt.date):
        self.store = store
        self.today = today

    def run(self) -> RecurrenceResult:
        result = RecurrenceResult(today=self.today)
        try:
            definitions = self.store.list_due_recurring(self.today)
        except DataStoreError as exc:
            logger.error("Recurring run aborted, could not load definitions: %s", exc.message)
            result.abort(exc.message)
            return result

        logger.info("Recurring run started | today=%s due=%s", self.today, len(definitions))
        for definition in definitions:
            result.processed += 1
            self._process(definition, result)

        logger.info(
            "Recurring run finished | processed=%s created=%s updated=%s errors=%s",
            result.processed,
            result.created,
            result.updated,
            len(result.errors),
        )
        return result

    def _process(self, definition: RecurringDefinition, result: RecurrenceResult) -> None:
        if not definition.enabled:
            result.skipped += 1
            result.details.append(
                {"id": definition.id, "name": definition.name, "skipped": "reminder type disabled"}
            )
            return

        try:
            next_due = catch_up(definition, self.today)
        except ValueError as exc:
            result.skipped += 1
            result.add_error("invalid_schedule", definition.id, str(exc), name=definition.name)
            logger.warning("Recurring reminder %s has an invalid schedule: %s", definition.id, exc)
            return

        created = self._spawn_all(definition, result)

        try:
            self.store.advance_recurring(definition.id, next_due, utcnow())
        except DataStoreError as exc:
            result.add_error("advance", definition.id, exc.message, name=definition.name)
            return

        result.updated += 1
        result.details.append(
            {
                "id": definition.id,
                "name": definition.name,
                "due_date": definition.next_due_date.isoformat(),
                "next_due_date": next_due.isoformat(),
                "created": created,
            }
        )
        logger.info(
            "Recurring reminder %s advanced | created=%s next_due=%s", definition.id, created, next_due
        )

    def _spawn_all(self, definition: RecurringDefinition, result: RecurrenceResult) -> int:
        try:
            employees = self.store.list_employees()
        except DataStoreError as exc:
            result.add_error("list_employees", definition.id, exc.message, name=definition.name)
            return 0

        created = 0
        for employee in employees:
            try:
                reminder_id = self.store.spawn_reminder(definition, employee, definition.next_due_date)
            except Exception as exc:  # noqa: BLE001
                message = exc.message if isinstance(exc, DataStoreError) else str(exc)
                logger.warning(
                    "Could not create reminder for employee %s from recurring %s: %s",
                    employee.id,
                    definition.id,
                    message,
                )
                result.add_error("spawn", definition.id, message, employee_id=employee.id)
                continue
            if reminder_id is not None:
                created += 1
        result.created += created
        metrics.recurring_spawned(created)
        return created
