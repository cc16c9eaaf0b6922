import datetime as dt

from sqlalchemy import select

from reminderly.core.exceptions import DataStoreError
from reminderly.models import models
from reminderly.models.entities import RecurringDefinition
from reminderly.services.reminders import RecurrenceAdvancer, SqlReminderStore, next_due_date_for
from reminderly.services.reminders.recurrence import catch_up


def _definition(**overrides) -> RecurringDefinition:
    values = dict(
        id=1,
        name="Monthly safety check",
        reminder_type_id=1,
        recurrence=models.RecurrenceClass.ONE_OFF,
        frequency=models.Frequency.MONTHLY,
        interval=1,
        next_due_date=dt.date(2024, 1, 31),
        anchor_date=dt.date(2024, 1, 31),
    )
    values.update(overrides)
    return RecurringDefinition(**values)


def test_monthly_schedule_returns_to_anchor_day():
    first = next_due_date_for(_definition())
    second = next_due_date_for(_definition(), first)
    assert first == dt.date(2024, 2, 29)
    assert second == dt.date(2024, 3, 31)


def test_yearly_leap_day_schedule():
    definition = _definition(
        frequency=models.Frequency.YEARLY,
        next_due_date=dt.date(2024, 2, 29),
        anchor_date=dt.date(2024, 2, 29),
    )
    dates = [definition.next_due_date]
    for _ in range(4):
        dates.append(next_due_date_for(definition, dates[-1]))
    assert dates[1:] == [
        dt.date(2025, 2, 28),
        dt.date(2026, 2, 28),
        dt.date(2027, 2, 28),
        dt.date(2028, 2, 29),
    ]


def test_birthday_definition_moves_in_years_whatever_the_frequency():
    definition = _definition(
        recurrence=models.RecurrenceClass.BIRTHDAY,
        frequency=models.Frequency.WEEKLY,
        next_due_date=dt.date(2025, 5, 4),
        anchor_date=dt.date(2025, 5, 4),
    )
    assert next_due_date_for(definition) == dt.date(2026, 5, 4)


def test_catch_up_lands_after_today():
    definition = _definition(
        frequency=models.Frequency.WEEKLY, next_due_date=dt.date(2025, 1, 1), anchor_date=None
    )
    assert catch_up(definition, dt.date(2025, 1, 20)) == dt.date(2025, 1, 22)


def _recurring(db_session, reminder_type, **overrides) -> models.RecurringReminder:
    values = dict(
        name="Monthly safety check",
        reminder_type_id=reminder_type.id,
        frequency="monthly",
        interval=1,
        next_due_date=dt.date(2024, 1, 31),
        anchor_date=dt.date(2024, 1, 31),
        enabled=True,
    )
    values.update(overrides)
    row = models.RecurringReminder(**values)
    db_session.add(row)
    db_session.commit()
    return row


def _spawned(db_session):
    return db_session.scalars(
        select(models.EmployeeReminder).where(models.EmployeeReminder.source == "recurring")
    ).all()


def test_run_spawns_one_reminder_per_employee_and_advances(db_session, make_employee, make_reminder_type):
    make_employee()
    make_employee()
    recurring = _recurring(db_session, make_reminder_type(name="Safety check"))

    result = RecurrenceAdvancer(SqlReminderStore(db_session), dt.date(2024, 1, 31)).run()

    assert result.success
    assert (result.processed, result.created, result.updated) == (1, 2, 1)
    spawned = _spawned(db_session)
    assert {r.due_date for r in spawned} == {dt.date(2024, 1, 31)}
    assert spawned[0].notes == "Auto-generated from recurring reminder: Monthly safety check"
    db_session.refresh(recurring)
    assert recurring.next_due_date == dt.date(2024, 2, 29)
    assert recurring.last_processed is not None


def test_second_run_same_day_creates_nothing(db_session, make_employee, make_reminder_type):
    make_employee()
    _recurring(db_session, make_reminder_type())
    store = SqlReminderStore(db_session)

    RecurrenceAdvancer(store, dt.date(2024, 1, 31)).run()
    second = RecurrenceAdvancer(store, dt.date(2024, 1, 31)).run()

    assert second.processed == 0
    assert len(_spawned(db_session)) == 1


def test_retry_after_partial_run_does_not_duplicate(db_session, make_employee, make_reminder_type):
    first, second = make_employee(), make_employee()
    recurring = _recurring(db_session, make_reminder_type())
    # A crashed earlier run already created the first employee's reminder
    db_session.add(
        models.EmployeeReminder(
            employee_id=first.id,
            reminder_type_id=recurring.reminder_type_id,
            due_date=recurring.next_due_date,
            source="recurring",
            recurring_reminder_id=recurring.id,
        )
    )
    db_session.commit()

    result = RecurrenceAdvancer(SqlReminderStore(db_session), dt.date(2024, 1, 31)).run()

    assert result.created == 1
    assert sorted(r.employee_id for r in _spawned(db_session)) == [first.id, second.id]


def test_catch_up_spawns_once_then_moves_past_today(db_session, make_employee, make_reminder_type):
    make_employee()
    recurring = _recurring(db_session, make_reminder_type())

    result = RecurrenceAdvancer(SqlReminderStore(db_session), dt.date(2024, 5, 10)).run()

    assert result.created == 1
    db_session.refresh(recurring)
    assert recurring.next_due_date == dt.date(2024, 5, 31)


def test_disabled_type_is_skipped_and_not_advanced(db_session, make_employee, make_reminder_type):
    make_employee()
    recurring = _recurring(db_session, make_reminder_type(enabled=False))

    result = RecurrenceAdvancer(SqlReminderStore(db_session), dt.date(2024, 1, 31)).run()

    assert result.skipped == 1
    assert result.created == 0
    db_session.refresh(recurring)
    assert recurring.next_due_date == dt.date(2024, 1, 31)


def test_future_definitions_are_left_alone(db_session, make_employee, make_reminder_type):
    make_employee()
    _recurring(db_session, make_reminder_type(), next_due_date=dt.date(2024, 3, 1))

    result = RecurrenceAdvancer(SqlReminderStore(db_session), dt.date(2024, 1, 31)).run()

    assert result.processed == 0


class _FlakySpawnStore(SqlReminderStore):
    def __init__(self, db, failing_employee_id):
        super().__init__(db)
        self.failing_employee_id = failing_employee_id

    def spawn_reminder(self, definition, employee, due_date):
        if employee.id == self.failing_employee_id:
            raise DataStoreError("spawn reminder", "deadlock detected")
        return super().spawn_reminder(definition, employee, due_date)


def test_spawn_failure_is_isolated_and_schedule_still_advances(db_session, make_employee, make_reminder_type):
    failing, healthy = make_employee(), make_employee()
    recurring = _recurring(db_session, make_reminder_type())

    result = RecurrenceAdvancer(_FlakySpawnStore(db_session, failing.id), dt.date(2024, 1, 31)).run()

    assert result.created == 1
    assert result.updated == 1
    [error] = result.errors
    assert error["type"] == "spawn"
    assert error["employee_id"] == failing.id
    assert [r.employee_id for r in _spawned(db_session)] == [healthy.id]
    db_session.refresh(recurring)
    assert recurring.next_due_date == dt.date(2024, 2, 29)


class _DownStore(SqlReminderStore):
    def list_due_recurring(self, today):
        raise DataStoreError("list recurring reminders", "could not connect")


def test_unreachable_store_aborts_run(db_session):
    result = RecurrenceAdvancer(_DownStore(db_session), dt.date(2024, 1, 31)).run()

    assert not result.success
    assert result.to_dict()["stats"]["errors"] == 1
