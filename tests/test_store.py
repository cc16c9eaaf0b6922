import datetime as dt

import pytest
from sqlalchemy.exc import OperationalError

from reminderly.core.exceptions import DataStoreError, ReminderNotFoundError
from reminderly.models import models
from reminderly.services.reminders import SqlReminderStore


def test_instances_are_narrowed_to_entities(db_session, make_employee, make_reminder_type, make_reminder):
    employee = make_employee(name="Ada Obi")
    reminder = make_reminder(employee, make_reminder_type(intervals=(7, 30, 7)), dt.date(2025, 7, 1))

    [instance] = SqlReminderStore(db_session).list_pending_reminders()

    assert instance.id == reminder.id
    assert instance.employee.name == "Ada Obi"
    assert instance.reminder_type.intervals == (30, 7)
    assert instance.reminder_type.policy.notify_hr is True
    assert instance.priority == models.Priority.NORMAL
    assert not instance.completed


def test_missing_template_and_policy_become_none(db_session, make_employee, make_reminder_type, make_reminder):
    make_reminder(make_employee(), make_reminder_type(subject=None, policy=False), dt.date(2025, 7, 1))

    [instance] = SqlReminderStore(db_session).list_pending_reminders()

    assert instance.reminder_type.template is None
    assert instance.reminder_type.policy is None


def test_mark_completed_sets_marker_once(db_session, make_employee, make_reminder_type, make_reminder):
    reminder = make_reminder(make_employee(), make_reminder_type(), dt.date(2025, 7, 1))
    store = SqlReminderStore(db_session)

    assert store.mark_completed(reminder.id, models.utcnow()) is True
    assert store.mark_completed(reminder.id, models.utcnow()) is False
    assert store.list_pending_reminders() == []
    with pytest.raises(ReminderNotFoundError):
        store.mark_completed(9999, models.utcnow())


def test_enabled_types_only(db_session, make_reminder_type):
    make_reminder_type(name="Visa")
    make_reminder_type(name="Old badge", enabled=False)

    assert [t.name for t in SqlReminderStore(db_session).list_enabled_reminder_types()] == ["Visa"]


def test_database_errors_surface_as_data_store_error(db_session, monkeypatch):
    def fail(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "scalars", fail)

    with pytest.raises(DataStoreError) as info:
        SqlReminderStore(db_session).list_employees()

    assert info.value.details["operation"] == "list employees"
