from __future__ import annotations

import datetime as dt
import os
from types import SimpleNamespace

os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from reminderly.core.config import settings  # noqa: E402
from reminderly.db import session as db_session_module  # noqa: E402
from reminderly.db.base_class import Base  # noqa: E402
from reminderly.db.session import SessionLocal  # noqa: E402
from reminderly.models import models  # noqa: E402
from reminderly.models.entities import SendResult  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
settings.ENV = "test"  # type: ignore[attr-defined]
db_session_module.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh database schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


class FakeSender:
    """Records every message; addresses in ``fail_for`` get a failed result."""

    def __init__(self, fail_for: set[str] | None = None, raise_for: set[str] | None = None):
        self.fail_for = {a.lower() for a in (fail_for or set())}
        self.raise_for = {a.lower() for a in (raise_for or set())}
        self.sent: list = []

    def send(self, message):
        address = message.recipients[0].email.lower()
        if address in self.raise_for:
            raise TimeoutError("provider timed out")
        self.sent.append(message)
        if address in self.fail_for:
            return SendResult(success=False, error="rejected")
        return SendResult(success=True, message_id=f"<msg-{len(self.sent)}@test>")

    def close(self):
        pass

    @property
    def addresses(self) -> list[str]:
        return [m.recipients[0].email for m in self.sent]


@pytest.fixture
def fake_sender():
    return FakeSender()


@pytest.fixture
def make_employee(db_session):
    counter = {"n": 0}

    def _make(**overrides) -> models.Employee:
        counter["n"] += 1
        values = dict(
            employee_id=f"E{counter['n']:03d}",
            name=f"Employee {counter['n']}",
            email=f"employee{counter['n']}@example.com",
            manager_email="manager@example.com",
            hr_email="hr@example.com",
            department="Operations",
        )
        values.update(overrides)
        employee = models.Employee(**values)
        db_session.add(employee)
        db_session.commit()
        return employee

    return _make


@pytest.fixture
def make_reminder_type(db_session):
    def _make(
        name: str = "Passport",
        intervals=(30, 7),
        subject: str | None = "{type} for {employee} due {days}",
        body: str | None = "Dear {recipient},\n{employee}'s {type} is due on {date}.",
        policy: dict | bool | None = None,
        recurrence: models.RecurrenceClass = models.RecurrenceClass.ONE_OFF,
        enabled: bool = True,
    ) -> models.ReminderType:
        reminder_type = models.ReminderType(name=name, enabled=enabled, recurrence=recurrence.value)
        for days in intervals:
            reminder_type.intervals.append(models.ReminderInterval(days_before=days))
        if subject is not None and body is not None:
            reminder_type.email_template = models.EmailTemplate(subject_template=subject, body_template=body)
        if policy is not False:
            values = dict(notify_employee=False, notify_manager=True, notify_hr=True, additional_emails=[])
            values.update(policy or {})
            reminder_type.recipient_config = models.RecipientConfig(**values)
        db_session.add(reminder_type)
        db_session.commit()
        return reminder_type

    return _make


@pytest.fixture
def make_reminder(db_session):
    def _make(employee, reminder_type, due_date: dt.date, **overrides) -> models.EmployeeReminder:
        reminder = models.EmployeeReminder(
            employee_id=employee.id,
            reminder_type_id=reminder_type.id,
            due_date=due_date,
            **overrides,
        )
        db_session.add(reminder)
        db_session.commit()
        return reminder

    return _make


# FastAPI TestClient fixture
from fastapi.testclient import TestClient  # noqa: E402

from reminderly.api import dependencies  # noqa: E402
from reminderly.api.main import app  # noqa: E402


@pytest.fixture
def client():  # noqa: D401 - simple factory fixture
    """Provide a FastAPI TestClient bound to the application."""
    return TestClient(app)


@pytest.fixture
def sender_override():
    """Swap the Brevo sender for a FakeSender in API tests."""
    sender = FakeSender()
    app.dependency_overrides[dependencies.email_sender] = lambda: sender
    yield SimpleNamespace(sender=sender)
    app.dependency_overrides.pop(dependencies.email_sender, None)
