"""Calendar arithmetic for reminder due dates and recurring schedules.

All functions take plain ``datetime.date`` values; "today" is always passed in
by the caller so results are deterministic.
"""
from __future__ import annotations

import calendar
import datetime as dt
from zoneinfo import ZoneInfo

from reminderly.models.models import Frequency, RecurrenceClass


def is_leap_year(year: int) -> bool:
    return year % 400 == 0 or (year % 4 == 0 and year % 100 != 0)


def days_in_month(year: int, month: int) -> int:
    if month == 2:
        return 29 if is_leap_year(year) else 28
    return calendar.monthrange(year, month)[1]


def anniversary_in_year(anchor: dt.date, year: int) -> dt.date:
    """Anchor month/day placed in ``year``; Feb 29 becomes Feb 28 in common years."""
    if anchor.month == 2 and anchor.day == 29 and not is_leap_year(year):
        return dt.date(year, 2, 28)
    return dt.date(year, anchor.month, anchor.day)


def next_occurrence(anchor: dt.date, today: dt.date) -> dt.date:
    """Next date on or after ``today`` that falls on the anchor's month/day."""
    candidate = anniversary_in_year(anchor, today.year)
    if candidate < today:
        candidate = anniversary_in_year(anchor, today.year + 1)
    return candidate


def effective_due_date(due_date: dt.date, recurrence: RecurrenceClass, today: dt.date) -> dt.date:
    """Date the reminder is due for in the current cycle.

    One-off reminders keep their stored date even once it is in the past;
    birthdays and anniversaries roll to the next upcoming occurrence.
    """
    if recurrence.is_annual:
        return next_occurrence(due_date, today)
    return due_date


def days_until_due(due_date: dt.date, recurrence: RecurrenceClass, today: dt.date) -> int:
    return (effective_due_date(due_date, recurrence, today) - today).days


def add_months(value: dt.date, months: int, anchor_day: int | None = None) -> dt.date:
    """Shift ``value`` by whole months, clamping to the end of short months.

    ``anchor_day`` is the day-of-month the schedule wants to land on; passing
    it lets a schedule clamped to Feb 28 return to the 31st in March.
    """
    index = value.year * 12 + (value.month - 1) + months
    year, month_index = divmod(index, 12)
    month = month_index + 1
    day = min(anchor_day or value.day, days_in_month(year, month))
    return dt.date(year, month, day)


def advance(
    value: dt.date,
    frequency: Frequency,
    interval: int,
    *,
    anchor: dt.date | None = None,
    annual: bool = False,
) -> dt.date:
    """Move ``value`` forward one cycle of ``interval`` × ``frequency``.

    Annual (birthday/anniversary) schedules always step in whole years so the
    occurrence keeps its month, whatever frequency was configured.
    """
    if interval < 1:
        raise ValueError(f"Recurring interval must be at least 1, got {interval}")
    anchor_day = (anchor or value).day
    if annual:
        return add_months(value, 12 * interval, anchor_day)
    if frequency == Frequency.DAILY:
        return value + dt.timedelta(days=interval)
    if frequency == Frequency.WEEKLY:
        return value + dt.timedelta(weeks=interval)
    if frequency == Frequency.MONTHLY:
        return add_months(value, interval, anchor_day)
    if frequency == Frequency.YEARLY:
        return add_months(value, 12 * interval, anchor_day)
    raise ValueError(f"Unsupported frequency: {frequency}")


def current_local_date(timezone_name: str, now: dt.datetime | None = None) -> dt.date:
    """Calendar date in the deployment's reference timezone."""
    moment = now or dt.datetime.now(dt.timezone.utc)
    return moment.astimezone(ZoneInfo(timezone_name)).date()
