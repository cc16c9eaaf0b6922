"""Due-reminder dispatch.

``DispatchEngine.run`` evaluates every open reminder for one calendar day,
sends the ones whose lead-time interval matches, and records the outcome.
A reminder/interval pair is claimed in the log store before any email goes
out, so concurrent or repeated runs cannot send the same notice twice.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Protocol

from reminderly import metrics
from reminderly.core.exceptions import (
    ConfigurationError,
    DataStoreError,
    DeliveryError,
    RecipientResolutionError,
    ReminderlyException,
)
from reminderly.models.entities import EmailMessage, Recipient, ReminderInstance, SendResult
from reminderly.models.models import LogStatus, TriggerType
from reminderly.services.reminders.dates import days_until_due, effective_due_date
from reminderly.services.reminders.intervals import matching_interval
from reminderly.services.reminders.recipients import resolve_recipients
from reminderly.services.reminders.results import DispatchResult, DispatchStatus, InstanceOutcome
from reminderly.services.reminders.store import ReminderStore
from reminderly.services.reminders.templates import build_variables, render_template

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, message: EmailMessage) -> SendResult: ...


def body_to_html(body: str) -> str:
    return body.replace("\r\n", "\n").replace("\n", "<br>\n")


class DispatchEngine:
    def __init__(
        self,
        store: ReminderStore,
        sender: EmailSender,
        today: dt.date,
        *,
        date_format: str = "%B %d, %Y",
        trigger_type: str = TriggerType.SCHEDULED.value,
    ):
        self.store = store
        self.sender = sender
        self.today = today
        self.date_format = date_format
        self.trigger_type = trigger_type

    def run(self) -> DispatchResult:
        """Process every uncompleted reminder once; never raises."""
        result = DispatchResult(today=self.today)
        try:
            reminders = self.store.list_pending_reminders()
        except DataStoreError as exc:
            logger.error("Dispatch run aborted, could not load reminders: %s", exc.message)
            result.abort(exc.message)
            return result

        logger.info("Dispatch run started | today=%s candidates=%s", self.today, len(reminders))
        for reminder in reminders:
            try:
                outcome = self.process(reminder)
            except DataStoreError as exc:
                logger.error("Dispatch run aborted at reminder %s: %s", reminder.id, exc.message)
                result.abort(exc.message)
                break
            except ConfigurationError as exc:
                logger.warning(
                    "Reminder %s (%s) misconfigured: %s", reminder.id, reminder.reminder_type.name, exc.reason
                )
                outcome = InstanceOutcome(
                    reminder.id, DispatchStatus.FAILED, reason="configuration", error=exc.reason
                )
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected error dispatching reminder %s", reminder.id)
                outcome = InstanceOutcome(reminder.id, DispatchStatus.FAILED, reason="error", error=str(exc))
            result.record(outcome)
            metrics.dispatch_outcome(outcome.status.value)

        logger.info(
            "Dispatch run finished | sent=%s failed=%s skipped=%s",
            result.sent,
            result.failed,
            result.skipped,
        )
        return result

    def process(self, reminder: ReminderInstance) -> InstanceOutcome:
        """Evaluate one reminder for today and send it when an interval matches."""
        if reminder.completed:
            return InstanceOutcome(reminder.id, DispatchStatus.SKIPPED, reason="already completed")

        self._require_configuration(reminder)
        days = days_until_due(reminder.due_date, reminder.reminder_type.recurrence, self.today)
        interval = matching_interval(days, reminder.reminder_type.intervals, reminder.reminder_type.name)
        if interval is None:
            return InstanceOutcome(
                reminder.id, DispatchStatus.SKIPPED, reason=f"not due for a reminder ({days} days remaining)"
            )
        if self.store.has_successful_dispatch(reminder.id, interval, self._cycle(reminder)):
            return InstanceOutcome(
                reminder.id, DispatchStatus.SKIPPED, reason="already sent", days_before=interval
            )
        return self._dispatch(reminder, interval, days)

    def send_now(self, reminder_id: int) -> InstanceOutcome:
        """Send a single reminder immediately, outside its configured intervals.

        The attempt is logged against the current days remaining (zero once
        overdue) and obeys the same one-success-per-interval rule.
        """
        reminder = self.store.get_reminder(reminder_id)
        if reminder.completed:
            return InstanceOutcome(reminder.id, DispatchStatus.SKIPPED, reason="already completed")
        self._require_configuration(reminder, require_intervals=False)
        days = days_until_due(reminder.due_date, reminder.reminder_type.recurrence, self.today)
        outcome = self._dispatch(reminder, max(days, 0), days)
        metrics.dispatch_outcome(outcome.status.value)
        return outcome

    def _require_configuration(self, reminder: ReminderInstance, require_intervals: bool = True) -> None:
        reminder_type = reminder.reminder_type
        if reminder_type.template is None:
            raise ConfigurationError("no email template configured", reminder_type.name)
        if reminder_type.policy is None:
            raise ConfigurationError("no recipient policy configured", reminder_type.name)
        if require_intervals and not reminder_type.intervals:
            raise ConfigurationError("no reminder intervals configured", reminder_type.name)

    def _log_context(self, reminder: ReminderInstance) -> dict[str, object]:
        return {
            "reminder_id": reminder.id,
            "employee_id": reminder.employee.id,
            "trigger_type": self.trigger_type,
        }

    def _cycle(self, reminder: ReminderInstance) -> dt.date:
        """Due date of the occurrence being reminded about; annual types roll forward."""
        return effective_due_date(reminder.due_date, reminder.reminder_type.recurrence, self.today)

    def _resolve(self, reminder: ReminderInstance) -> list[Recipient]:
        recipients = resolve_recipients(reminder.reminder_type.policy, reminder.employee)
        if not recipients:
            raise RecipientResolutionError(reminder.id)
        return recipients

    def _dispatch(self, reminder: ReminderInstance, days_before: int, days: int) -> InstanceOutcome:
        cycle = self._cycle(reminder)
        try:
            recipients = self._resolve(reminder)
        except RecipientResolutionError as exc:
            self.store.record_failed_dispatch(
                reminder, days_before, cycle, [], exc.reason, self.trigger_type
            )
            logger.warning("Reminder %s has no recipients", reminder.id)
            return InstanceOutcome(
                reminder.id, DispatchStatus.FAILED, reason=exc.reason, days_before=days_before, error=exc.reason
            )

        addresses = [recipient.email for recipient in recipients]
        log_id = self.store.claim_dispatch(reminder, days_before, cycle, addresses, self.trigger_type)
        if log_id is None:
            return InstanceOutcome(
                reminder.id, DispatchStatus.SKIPPED, reason="already dispatched", days_before=days_before
            )

        message_ids: list[str] = []
        errors: list[str] = []
        management_sent = False
        for recipient in recipients:
            try:
                sent = self._deliver(reminder, recipient, days)
            except DeliveryError as exc:
                metrics.email_failed()
                errors.append(f"{exc.recipient}: {exc.error}")
                continue
            metrics.email_sent()
            if sent.message_id:
                message_ids.append(sent.message_id)
            management_sent = management_sent or recipient.is_management

        if management_sent:
            status, error = LogStatus.SENT.value, ("; ".join(errors) or None)
        else:
            status = LogStatus.FAILED.value
            error = "; ".join(["no management recipient was notified", *errors])

        self.store.finish_dispatch(log_id, status, addresses, message_ids, error)
        if status == LogStatus.SENT.value:
            logger.info(
                "Reminder %s sent | interval=%s recipients=%s",
                reminder.id,
                days_before,
                len(addresses),
                extra=self._log_context(reminder),
            )
            return InstanceOutcome(
                reminder.id, DispatchStatus.SENT, days_before=days_before, recipients=addresses, error=error
            )
        logger.warning(
            "Reminder %s failed | interval=%s error=%s",
            reminder.id,
            days_before,
            error,
            extra=self._log_context(reminder),
        )
        return InstanceOutcome(
            reminder.id,
            DispatchStatus.FAILED,
            reason="delivery failed",
            days_before=days_before,
            recipients=addresses,
            error=error,
        )

    def _deliver(self, reminder: ReminderInstance, recipient: Recipient, days: int) -> SendResult:
        """Send one personalised email; any failure is raised as DeliveryError."""
        template = reminder.reminder_type.template
        due = self._cycle(reminder)
        variables = build_variables(
            reminder_type=reminder.reminder_type.name,
            employee=reminder.employee.name,
            days_until_due=days,
            due_date=due,
            recipient=recipient.role.label,
            date_format=self.date_format,
        )
        message = EmailMessage(
            recipients=(recipient,),
            subject=render_template(template.subject, variables),
            html_body=body_to_html(render_template(template.body, variables)),
        )
        try:
            result = self.sender.send(message)
        except ReminderlyException as exc:
            logger.warning("Send to %s failed for reminder %s: %s", recipient.email, reminder.id, exc.message)
            raise DeliveryError(recipient.email, exc.message) from exc
        except Exception as exc:  # noqa: BLE001
            logger.exception("Send to %s raised for reminder %s", recipient.email, reminder.id)
            raise DeliveryError(recipient.email, str(exc)) from exc
        if not result.success:
            raise DeliveryError(recipient.email, result.error or "send failed")
        return result
