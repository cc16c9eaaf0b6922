"""Common FastAPI dependencies."""
from typing import Annotated, TypeAlias

from fastapi import Depends
from sqlalchemy.orm import Session

from reminderly.db.session import get_db
from reminderly.services.brevo_service import BrevoEmailSender, get_email_sender

DbDep: TypeAlias = Annotated[Session, Depends(get_db)]


def email_sender():
    sender = get_email_sender()
    try:
        yield sender
    finally:
        sender.close()


SenderDep: TypeAlias = Annotated[BrevoEmailSender, Depends(email_sender)]
