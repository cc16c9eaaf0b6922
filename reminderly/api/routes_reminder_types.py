"""Reminder type catalog routes."""
from fastapi import APIRouter, status

from reminderly.api.dependencies import DbDep
from reminderly.models.schemas import (
    EmailTemplateIn,
    IntervalIn,
    RecipientConfigIn,
    ReminderTypeCreate,
    ReminderTypeOut,
    ReminderTypeUpdate,
)
from reminderly.services.reminder_type_service import ReminderTypeService, to_out

router = APIRouter(prefix="/reminder-types", tags=["reminder-types"])


@router.get("", response_model=list[ReminderTypeOut])
def list_reminder_types(db: DbDep):
    return [to_out(t) for t in ReminderTypeService(db).list_types()]


@router.post("", response_model=ReminderTypeOut, status_code=status.HTTP_201_CREATED)
def create_reminder_type(data: ReminderTypeCreate, db: DbDep):
    return to_out(ReminderTypeService(db).create_type(data))


@router.get("/{reminder_type_id}", response_model=ReminderTypeOut)
def get_reminder_type(reminder_type_id: int, db: DbDep):
    return to_out(ReminderTypeService(db).get_type(reminder_type_id))


@router.patch("/{reminder_type_id}", response_model=ReminderTypeOut)
def update_reminder_type(reminder_type_id: int, data: ReminderTypeUpdate, db: DbDep):
    return to_out(ReminderTypeService(db).update_type(reminder_type_id, data))


@router.delete("/{reminder_type_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reminder_type(reminder_type_id: int, db: DbDep) -> None:
    ReminderTypeService(db).delete_type(reminder_type_id)


@router.post("/{reminder_type_id}/intervals", response_model=ReminderTypeOut, status_code=status.HTTP_201_CREATED)
def add_interval(reminder_type_id: int, data: IntervalIn, db: DbDep):
    return to_out(ReminderTypeService(db).add_interval(reminder_type_id, data.days_before))


@router.delete("/{reminder_type_id}/intervals/{days_before}", response_model=ReminderTypeOut)
def delete_interval(reminder_type_id: int, days_before: int, db: DbDep):
    return to_out(ReminderTypeService(db).delete_interval(reminder_type_id, days_before))


@router.put("/{reminder_type_id}/template", response_model=ReminderTypeOut)
def upsert_template(reminder_type_id: int, data: EmailTemplateIn, db: DbDep):
    return to_out(ReminderTypeService(db).upsert_template(reminder_type_id, data))


@router.put("/{reminder_type_id}/recipients", response_model=ReminderTypeOut)
def upsert_recipients(reminder_type_id: int, data: RecipientConfigIn, db: DbDep):
    return to_out(ReminderTypeService(db).upsert_recipients(reminder_type_id, data))
