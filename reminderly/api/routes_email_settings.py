"""Email provider settings: masked view, connectivity check and test send."""
from fastapi import APIRouter

from reminderly.api.dependencies import SenderDep
from reminderly.models.schemas import ActionResult, EmailSettingsOut, EmailTestRequest

router = APIRouter(prefix="/settings/email", tags=["settings"])


@router.get("", response_model=EmailSettingsOut)
def get_email_settings(sender: SenderDep):
    return sender.config.masked()


@router.post("/test", response_model=ActionResult)
def test_email_connection(sender: SenderDep):
    success, message = sender.check_account()
    return ActionResult(success=success, message=message)


@router.post("/test-send", response_model=ActionResult)
def send_test_email(data: EmailTestRequest, sender: SenderDep):
    success, message = sender.send_test_email(data.to.strip())
    return ActionResult(success=success, message=message)
