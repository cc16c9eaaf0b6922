"""Lead-time interval matching."""
from __future__ import annotations

from collections.abc import Iterable

from reminderly.core.exceptions import ConfigurationError


def normalize_intervals(intervals: Iterable[int]) -> tuple[int, ...]:
    """Distinct non-negative intervals, largest lead time first."""
    values = set()
    for value in intervals:
        if value < 0:
            raise ValueError(f"Interval must be non-negative, got {value}")
        values.add(value)
    return tuple(sorted(values, reverse=True))


def matching_interval(days_until_due: int, intervals: Iterable[int], reminder_type: str | None = None) -> int | None:
    """Interval that fires today, or None.

    Matching is exact: an interval of 7 fires when the due date is 7 days out
    and on no other day. An empty interval set is a configuration problem.
    """
    configured = tuple(intervals)
    if not configured:
        raise ConfigurationError("no reminder intervals configured", reminder_type)
    for interval in configured:
        if interval == days_until_due:
            return interval
    return None


def should_fire(days_until_due: int, intervals: Iterable[int]) -> bool:
    return matching_interval(days_until_due, intervals) is not None
