import datetime as dt

import pytest

from reminderly.core.exceptions import ConfigurationError
from reminderly.models.models import RecurrenceClass
from reminderly.services.reminders.dates import days_until_due
from reminderly.services.reminders.intervals import matching_interval, normalize_intervals, should_fire


def test_normalize_sorts_descending_and_drops_duplicates():
    assert normalize_intervals([7, 30, 7, 0]) == (30, 7, 0)


def test_normalize_rejects_negative_interval():
    with pytest.raises(ValueError):
        normalize_intervals([5, -1])


def test_fires_only_on_exact_interval_days():
    due = dt.date(2025, 7, 31)
    fired = []
    day = dt.date(2025, 6, 25)
    while day <= due:
        days = days_until_due(due, RecurrenceClass.ONE_OFF, day)
        if should_fire(days, (30, 7)):
            fired.append(days)
        day += dt.timedelta(days=1)
    assert fired == [30, 7]


def test_no_match_for_neighbouring_days():
    assert matching_interval(29, (30, 7)) is None
    assert matching_interval(31, (30, 7)) is None
    assert matching_interval(30, (30, 7)) == 30


def test_empty_interval_set_is_configuration_error():
    with pytest.raises(ConfigurationError) as info:
        matching_interval(7, (), "Visa")
    assert info.value.reason == "no reminder intervals configured"
    assert info.value.details["reminder_type"] == "Visa"
