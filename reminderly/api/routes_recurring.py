"""Recurring reminder definition routes."""
from fastapi import APIRouter, status

from reminderly.api.dependencies import DbDep
from reminderly.models.schemas import RecurringReminderCreate, RecurringReminderOut, RecurringReminderUpdate
from reminderly.services.recurring_service import RecurringService

router = APIRouter(prefix="/recurring-reminders", tags=["recurring"])


@router.get("", response_model=list[RecurringReminderOut])
def list_recurring(db: DbDep):
    return RecurringService(db).list_definitions()


@router.post("", response_model=RecurringReminderOut, status_code=status.HTTP_201_CREATED)
def create_recurring(data: RecurringReminderCreate, db: DbDep):
    return RecurringService(db).create_definition(data)


@router.get("/{recurring_id}", response_model=RecurringReminderOut)
def get_recurring(recurring_id: int, db: DbDep):
    return RecurringService(db).get_definition(recurring_id)


@router.patch("/{recurring_id}", response_model=RecurringReminderOut)
def update_recurring(recurring_id: int, data: RecurringReminderUpdate, db: DbDep):
    return RecurringService(db).update_definition(recurring_id, data)


@router.delete("/{recurring_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recurring(recurring_id: int, db: DbDep) -> None:
    RecurringService(db).delete_definition(recurring_id)
