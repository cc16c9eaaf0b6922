"""Resolve who receives a reminder email."""
from __future__ import annotations

from reminderly.models.entities import EmployeeContact, Recipient, RecipientPolicy, RecipientRole


def _clean(address: str | None) -> str | None:
    if address is None:
        return None
    address = address.strip()
    return address or None


def resolve_recipients(policy: RecipientPolicy, employee: EmployeeContact) -> list[Recipient]:
    """Ordered, de-duplicated recipients for one employee.

    HR comes first, then the manager, then additional addresses, and the
    employee last. When the same address appears twice the earlier (more
    senior) role keeps it.
    """
    candidates: list[Recipient] = []

    hr_email = _clean(employee.hr_email)
    if policy.notify_hr and hr_email:
        candidates.append(Recipient(hr_email, "HR", RecipientRole.HR))

    manager_email = _clean(employee.manager_email)
    if policy.notify_manager and manager_email:
        candidates.append(Recipient(manager_email, "Manager", RecipientRole.MANAGER))

    for raw in policy.additional_emails:
        address = _clean(raw)
        if address:
            candidates.append(Recipient(address, "Additional Recipient", RecipientRole.ADDITIONAL))

    employee_email = _clean(employee.email)
    if policy.notify_employee and employee_email:
        candidates.append(Recipient(employee_email, employee.name, RecipientRole.EMPLOYEE))

    seen: set[str] = set()
    recipients: list[Recipient] = []
    for recipient in candidates:
        key = recipient.email.lower()
        if key in seen:
            continue
        seen.add(key)
        recipients.append(recipient)
    return recipients


def management_recipients(recipients: list[Recipient]) -> list[Recipient]:
    return [recipient for recipient in recipients if recipient.is_management]
