"""Reminder instance routes."""
from fastapi import APIRouter, Query, status

from reminderly.api.dependencies import DbDep, SenderDep
from reminderly.models.schemas import (
    BulkReminderCreate,
    ReminderCreate,
    ReminderDetailOut,
    ReminderLogOut,
    ReminderOut,
    ReminderUpdate,
    SendNowOut,
)
from reminderly.services.reminder_service import ReminderService, to_out, today_local
from reminderly.services.reminders import DispatchStatus

router = APIRouter(prefix="/reminders", tags=["reminders"])


@router.get("", response_model=list[ReminderOut])
def list_reminders(
    db: DbDep,
    type_id: int | None = Query(None, description="Filter by reminder type"),
    search: str | None = Query(None, max_length=100),
    include_completed: bool = True,
):
    return ReminderService(db).list_reminders(
        reminder_type_id=type_id, search=search, include_completed=include_completed
    )


@router.post("", response_model=ReminderOut, status_code=status.HTTP_201_CREATED)
def create_reminder(data: ReminderCreate, db: DbDep):
    return to_out(ReminderService(db).create_reminder(data), today_local())


@router.post("/bulk", response_model=list[ReminderOut], status_code=status.HTTP_201_CREATED)
def create_reminders_bulk(data: BulkReminderCreate, db: DbDep):
    today = today_local()
    return [to_out(r, today) for r in ReminderService(db).create_bulk(data)]


@router.get("/{reminder_id}", response_model=ReminderDetailOut)
def get_reminder(reminder_id: int, db: DbDep):
    return ReminderService(db).get_detail(reminder_id)


@router.patch("/{reminder_id}", response_model=ReminderOut)
def update_reminder(reminder_id: int, data: ReminderUpdate, db: DbDep):
    return to_out(ReminderService(db).update_reminder(reminder_id, data), today_local())


@router.delete("/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reminder(reminder_id: int, db: DbDep) -> None:
    ReminderService(db).delete_reminder(reminder_id)


@router.post("/{reminder_id}/complete", response_model=ReminderOut)
def complete_reminder(reminder_id: int, db: DbDep):
    return to_out(ReminderService(db).complete_reminder(reminder_id), today_local())


@router.post("/{reminder_id}/send", response_model=SendNowOut)
def send_reminder_now(reminder_id: int, db: DbDep, sender: SenderDep):
    outcome = ReminderService(db).send_now(reminder_id, sender)
    return SendNowOut(
        success=outcome.status == DispatchStatus.SENT,
        status=outcome.status.value,
        days_before=outcome.days_before,
        recipients=outcome.recipients,
        reason=outcome.reason,
        error=outcome.error,
    )


@router.get("/{reminder_id}/logs", response_model=list[ReminderLogOut])
def list_reminder_logs(reminder_id: int, db: DbDep):
    return ReminderService(db).list_logs(reminder_id)
