"""Reminder type catalog: intervals, email template and recipient policy."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from reminderly.core.exceptions import (
    DuplicateIntervalError,
    IntervalNotFoundError,
    ReminderTypeAlreadyExistsError,
    ReminderTypeNotFoundError,
)
from reminderly.models.models import (
    EmailTemplate,
    RecipientConfig,
    RecurrenceClass,
    ReminderInterval,
    ReminderType,
)
from reminderly.models.schemas import (
    EmailTemplateIn,
    EmailTemplateOut,
    RecipientConfigIn,
    RecipientConfigOut,
    ReminderTypeCreate,
    ReminderTypeOut,
    ReminderTypeUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_DAYS = 30


def default_subject(type_name: str) -> str:
    return f"[{type_name}] Action Required: {{employee}}'s Document Expiring in {{days}}"


def default_body(type_name: str) -> str:
    return (
        "Dear {recipient},\n\n"
        f"This is to inform you that {{employee}}'s {type_name} is due for renewal/review "
        "{days} (on {date}).\n\n"
        f"Document Type: {type_name}\n"
        "Employee: {employee}\n"
        "Due Date: {date}\n\n"
        "Please take appropriate action to ensure timely renewal/review of this document.\n\n"
        "Best regards,\n"
        "HR Department"
    )


def to_out(reminder_type: ReminderType) -> ReminderTypeOut:
    return ReminderTypeOut(
        id=reminder_type.id,
        name=reminder_type.name,
        enabled=reminder_type.enabled,
        recurrence=reminder_type.recurrence,
        intervals=sorted({i.days_before for i in reminder_type.intervals}, reverse=True),
        email_template=(
            EmailTemplateOut.model_validate(reminder_type.email_template) if reminder_type.email_template else None
        ),
        recipient_config=(
            RecipientConfigOut.model_validate(reminder_type.recipient_config)
            if reminder_type.recipient_config
            else None
        ),
    )


class ReminderTypeService:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return select(ReminderType).options(
            selectinload(ReminderType.intervals),
            selectinload(ReminderType.email_template),
            selectinload(ReminderType.recipient_config),
        )

    def list_types(self) -> Sequence[ReminderType]:
        return self.db.scalars(self._query().order_by(ReminderType.name)).all()

    def get_type(self, reminder_type_id: int) -> ReminderType:
        reminder_type = self.db.scalar(self._query().where(ReminderType.id == reminder_type_id))
        if reminder_type is None:
            raise ReminderTypeNotFoundError(reminder_type_id)
        return reminder_type

    def _ensure_name_free(self, name: str, exclude_id: int | None = None) -> None:
        query = select(ReminderType.id).where(ReminderType.name == name)
        if exclude_id is not None:
            query = query.where(ReminderType.id != exclude_id)
        if self.db.scalar(query) is not None:
            raise ReminderTypeAlreadyExistsError(name)

    def create_type(self, data: ReminderTypeCreate) -> ReminderType:
        """Create a type with a 30-day interval, the standard HR template and HR+manager recipients."""
        name = data.name.strip()
        self._ensure_name_free(name)
        recurrence = data.recurrence or RecurrenceClass.infer(name)
        reminder_type = ReminderType(name=name, enabled=data.enabled, recurrence=recurrence.value)
        reminder_type.intervals.append(ReminderInterval(days_before=DEFAULT_INTERVAL_DAYS))
        reminder_type.email_template = EmailTemplate(
            subject_template=default_subject(name), body_template=default_body(name)
        )
        reminder_type.recipient_config = RecipientConfig(
            notify_employee=False, notify_manager=True, notify_hr=True, additional_emails=[]
        )
        self.db.add(reminder_type)
        self.db.commit()
        logger.info("Created reminder type %s (%s)", reminder_type.id, name)
        return self.get_type(reminder_type.id)

    def update_type(self, reminder_type_id: int, data: ReminderTypeUpdate) -> ReminderType:
        reminder_type = self.get_type(reminder_type_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("name"):
            name = changes["name"].strip()
            self._ensure_name_free(name, exclude_id=reminder_type.id)
            reminder_type.name = name
        if changes.get("enabled") is not None:
            reminder_type.enabled = changes["enabled"]
            logger.info("Reminder type %s enabled=%s", reminder_type.id, reminder_type.enabled)
        if changes.get("recurrence") is not None:
            reminder_type.recurrence = RecurrenceClass(changes["recurrence"]).value
        self.db.commit()
        return self.get_type(reminder_type.id)

    def delete_type(self, reminder_type_id: int) -> None:
        reminder_type = self.get_type(reminder_type_id)
        self.db.delete(reminder_type)
        self.db.commit()
        logger.info("Deleted reminder type %s", reminder_type_id)

    def add_interval(self, reminder_type_id: int, days_before: int) -> ReminderType:
        reminder_type = self.get_type(reminder_type_id)
        if any(i.days_before == days_before for i in reminder_type.intervals):
            raise DuplicateIntervalError(reminder_type_id, days_before)
        self.db.add(ReminderInterval(reminder_type_id=reminder_type_id, days_before=days_before))
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateIntervalError(reminder_type_id, days_before) from exc
        self.db.expire(reminder_type)
        return self.get_type(reminder_type_id)

    def delete_interval(self, reminder_type_id: int, days_before: int) -> ReminderType:
        reminder_type = self.get_type(reminder_type_id)
        interval = next((i for i in reminder_type.intervals if i.days_before == days_before), None)
        if interval is None:
            raise IntervalNotFoundError(reminder_type_id, days_before)
        reminder_type.intervals.remove(interval)
        self.db.commit()
        if not reminder_type.intervals:
            logger.warning("Reminder type %s has no intervals left and will not fire", reminder_type_id)
        return self.get_type(reminder_type_id)

    def upsert_template(self, reminder_type_id: int, data: EmailTemplateIn) -> ReminderType:
        reminder_type = self.get_type(reminder_type_id)
        if reminder_type.email_template is None:
            reminder_type.email_template = EmailTemplate(**data.model_dump())
        else:
            reminder_type.email_template.subject_template = data.subject_template
            reminder_type.email_template.body_template = data.body_template
        self.db.commit()
        return self.get_type(reminder_type_id)

    def upsert_recipients(self, reminder_type_id: int, data: RecipientConfigIn) -> ReminderType:
        reminder_type = self.get_type(reminder_type_id)
        values = data.model_dump()
        values["additional_emails"] = [e.strip() for e in data.additional_emails if e and e.strip()]
        if reminder_type.recipient_config is None:
            reminder_type.recipient_config = RecipientConfig(**values)
        else:
            for field, value in values.items():
                setattr(reminder_type.recipient_config, field, value)
        self.db.commit()
        return self.get_type(reminder_type_id)
