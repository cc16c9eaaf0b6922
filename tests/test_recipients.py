from reminderly.models.entities import EmployeeContact, RecipientPolicy, RecipientRole
from reminderly.services.reminders.recipients import management_recipients, resolve_recipients


def _employee(**overrides) -> EmployeeContact:
    values = dict(
        id=1,
        name="Ada Obi",
        email="ada@example.com",
        manager_email="boss@example.com",
        hr_email="hr@example.com",
    )
    values.update(overrides)
    return EmployeeContact(**values)


def test_precedence_hr_manager_additional_employee():
    policy = RecipientPolicy(
        notify_employee=True, notify_manager=True, notify_hr=True, additional_emails=("ops@example.com",)
    )
    recipients = resolve_recipients(policy, _employee())
    assert [(r.email, r.role) for r in recipients] == [
        ("hr@example.com", RecipientRole.HR),
        ("boss@example.com", RecipientRole.MANAGER),
        ("ops@example.com", RecipientRole.ADDITIONAL),
        ("ada@example.com", RecipientRole.EMPLOYEE),
    ]


def test_missing_hr_address_and_disabled_employee_are_skipped():
    policy = RecipientPolicy(notify_hr=True, notify_manager=True, notify_employee=False)
    recipients = resolve_recipients(policy, _employee(hr_email=None, manager_email="m@x.com"))
    assert [(r.email, r.role) for r in recipients] == [("m@x.com", RecipientRole.MANAGER)]


def test_duplicates_are_removed_case_insensitively_keeping_first_role():
    policy = RecipientPolicy(
        notify_employee=True,
        additional_emails=("HR@example.com", " ", "extra@example.com", "Extra@Example.com"),
    )
    recipients = resolve_recipients(policy, _employee(manager_email="hr@EXAMPLE.com"))
    assert [r.email for r in recipients] == ["hr@example.com", "extra@example.com", "ada@example.com"]
    assert recipients[0].role == RecipientRole.HR


def test_empty_when_no_enabled_channel_has_an_address():
    policy = RecipientPolicy(notify_employee=False, notify_manager=True, notify_hr=True)
    assert resolve_recipients(policy, _employee(hr_email="", manager_email=None)) == []


def test_management_subset_excludes_employee():
    policy = RecipientPolicy(notify_employee=True)
    recipients = resolve_recipients(policy, _employee())
    assert [r.email for r in management_recipients(recipients)] == ["hr@example.com", "boss@example.com"]


def test_role_labels_used_for_salutation():
    assert RecipientRole.HR.label == "HR Department"
    assert RecipientRole.ADDITIONAL.label == "Management Team"
    assert not RecipientRole.EMPLOYEE.is_management
