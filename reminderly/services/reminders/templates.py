"""Placeholder substitution for reminder subjects and bodies.

Templates use ``{name}`` tokens. A token with no supplied value is left in
place so operators can see which binding is missing; an empty string is
substituted like any other value.
"""
from __future__ import annotations

import datetime as dt
import re
from collections.abc import Mapping

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def render_template(template: str | None, variables: Mapping[str, str | None]) -> str:
    if not template:
        return ""

    def _substitute(match: re.Match[str]) -> str:
        value = variables.get(match.group(1))
        if value is None:
            return match.group(0)
        return str(value)

    return _PLACEHOLDER.sub(_substitute, template)


def days_phrase(days_until_due: int) -> str:
    if days_until_due <= 0:
        return "today"
    return f"in {days_until_due} days"


def build_variables(
    *,
    reminder_type: str,
    employee: str,
    days_until_due: int,
    due_date: dt.date,
    recipient: str | None = None,
    date_format: str = "%B %d, %Y",
) -> dict[str, str | None]:
    formatted = due_date.strftime(date_format)
    return {
        "type": reminder_type,
        "employee": employee,
        "employeeName": employee,
        "days": days_phrase(days_until_due),
        "daysRemaining": str(days_until_due),
        "date": formatted,
        "dueDate": formatted,
        "recipient": recipient,
    }
