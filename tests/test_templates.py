import datetime as dt

from reminderly.services.reminders.templates import build_variables, days_phrase, render_template


def test_missing_placeholders_stay_literal():
    rendered = render_template("Dear {recipient}, your {type} is due {days}", {"type": "License"})
    assert rendered == "Dear {recipient}, your License is due {days}"


def test_empty_value_is_substituted():
    assert render_template("Hi {recipient}!", {"recipient": ""}) == "Hi !"


def test_none_value_keeps_token():
    assert render_template("Hi {recipient}", {"recipient": None}) == "Hi {recipient}"


def test_every_occurrence_is_replaced():
    assert render_template("{type}/{type}", {"type": "Visa"}) == "Visa/Visa"


def test_non_identifier_braces_are_untouched():
    assert render_template("{ not a token } {1x}", {"1x": "nope"}) == "{ not a token } {1x}"


def test_days_phrase():
    assert days_phrase(0) == "today"
    assert days_phrase(-3) == "today"
    assert days_phrase(7) == "in 7 days"


def test_build_variables_formats_due_date():
    variables = build_variables(
        reminder_type="Passport",
        employee="Ada Obi",
        days_until_due=7,
        due_date=dt.date(2025, 3, 9),
        recipient="Manager",
    )
    assert variables["date"] == "March 09, 2025"
    assert variables["days"] == "in 7 days"
    assert variables["daysRemaining"] == "7"
    rendered = render_template("Dear {recipient}, {employee}'s {type} expires {days} ({date})", variables)
    assert rendered == "Dear Manager, Ada Obi's Passport expires in 7 days (March 09, 2025)"
