import datetime as dt

import httpx

from reminderly.api import dependencies
from reminderly.api.main import app
from reminderly.services.brevo_service import BrevoConfig, BrevoEmailSender
from reminderly.services.reminders.dates import current_local_date


def _today() -> dt.date:
    return current_local_date("UTC")


def _create_employee(client, **overrides):
    payload = {
        "employee_id": "E100",
        "name": "Ada Obi",
        "email": "ada@example.com",
        "department": "Finance",
        "manager_email": "boss@example.com",
        "hr_email": "hr@example.com",
    }
    payload.update(overrides)
    resp = client.post("/employees", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_type(client, name="Passport"):
    resp = client.post("/reminder-types", json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_employee_crud(client):
    employee = _create_employee(client)

    assert client.get("/employees", params={"search": "fin"}).json()[0]["id"] == employee["id"]
    resp = client.patch(f"/employees/{employee['id']}", json={"position": "Analyst"})
    assert resp.json()["position"] == "Analyst"

    dup = client.post("/employees", json={"employee_id": "E100", "name": "Other"})
    assert dup.status_code == 409
    assert dup.json()["error"]["code"] == "EMP101"

    assert client.delete(f"/employees/{employee['id']}").status_code == 204
    assert client.get(f"/employees/{employee['id']}").status_code == 404


def test_new_reminder_type_gets_defaults(client):
    reminder_type = _create_type(client, "Work Permit")

    assert reminder_type["intervals"] == [30]
    assert reminder_type["recurrence"] == "one_off"
    assert reminder_type["email_template"]["subject_template"].startswith("[Work Permit] Action Required")
    config = reminder_type["recipient_config"]
    assert (config["notify_hr"], config["notify_manager"], config["notify_employee"]) == (True, True, False)

    assert client.post("/reminder-types", json={"name": "Work Permit"}).status_code == 409


def test_birthday_type_name_infers_annual_recurrence(client):
    assert _create_type(client, "Employee Birthday")["recurrence"] == "birthday"


def test_interval_management(client):
    type_id = _create_type(client)["id"]

    resp = client.post(f"/reminder-types/{type_id}/intervals", json={"days_before": 7})
    assert resp.status_code == 201
    assert resp.json()["intervals"] == [30, 7]

    dup = client.post(f"/reminder-types/{type_id}/intervals", json={"days_before": 7})
    assert dup.status_code == 409
    assert client.post(f"/reminder-types/{type_id}/intervals", json={"days_before": -1}).status_code == 422

    assert client.delete(f"/reminder-types/{type_id}/intervals/30").json()["intervals"] == [7]
    assert client.delete(f"/reminder-types/{type_id}/intervals/30").status_code == 404


def test_template_and_recipient_updates(client):
    type_id = _create_type(client)["id"]

    resp = client.put(
        f"/reminder-types/{type_id}/template",
        json={"subject_template": "{type} soon", "body_template": "Hello {recipient}"},
    )
    assert resp.json()["email_template"]["subject_template"] == "{type} soon"

    resp = client.put(
        f"/reminder-types/{type_id}/recipients",
        json={"notify_employee": True, "notify_hr": False, "additional_emails": ["ops@example.com", "  "]},
    )
    config = resp.json()["recipient_config"]
    assert config["notify_employee"] is True
    assert config["notify_hr"] is False
    assert config["additional_emails"] == ["ops@example.com"]


def test_reminder_lifecycle(client):
    employee = _create_employee(client)
    type_id = _create_type(client)["id"]
    due = _today() + dt.timedelta(days=12)

    resp = client.post(
        "/reminders",
        json={"employee_id": employee["id"], "reminder_type_id": type_id, "due_date": due.isoformat()},
    )
    assert resp.status_code == 201
    reminder = resp.json()
    assert reminder["status"] == "pending"
    assert reminder["days_remaining"] == 12
    assert reminder["employee_code"] == "E100"

    listed = client.get("/reminders", params={"type_id": type_id}).json()
    assert [r["id"] for r in listed] == [reminder["id"]]

    done = client.post(f"/reminders/{reminder['id']}/complete")
    assert done.status_code == 200
    assert done.json()["status"] == "completed"

    again = client.post(f"/reminders/{reminder['id']}/complete")
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "REM003"

    assert client.get("/reminders", params={"include_completed": False}).json() == []
    assert client.post("/reminders/9999/complete").status_code == 404


def test_reminders_sorted_by_next_occurrence(client):
    employee = _create_employee(client)
    passport = _create_type(client)["id"]
    birthday = _create_type(client, "Birthday")["id"]
    today = _today()

    client.post(
        "/reminders",
        json={
            "employee_id": employee["id"],
            "reminder_type_id": passport,
            "due_date": (today + dt.timedelta(days=40)).isoformat(),
        },
    )
    birth = today.replace(year=1992)
    client.post(
        "/reminders",
        json={"employee_id": employee["id"], "reminder_type_id": birthday, "due_date": birth.isoformat()},
    )

    listed = client.get("/reminders").json()
    assert [r["reminder_type"] for r in listed][0] == "Birthday"
    assert listed[0]["due_date"] == birth.isoformat()
    assert listed[0]["next_due_date"] >= today.isoformat()


def test_bulk_create_rejects_disabled_type(client):
    employee = _create_employee(client)
    active = _create_type(client)["id"]
    disabled = _create_type(client, "Visa")["id"]
    client.patch(f"/reminder-types/{disabled}", json={"enabled": False})
    due = (_today() + dt.timedelta(days=60)).isoformat()

    resp = client.post(
        "/reminders/bulk",
        json={
            "employee_id": employee["id"],
            "reminders": [
                {"reminder_type_id": active, "due_date": due},
                {"reminder_type_id": disabled, "due_date": due},
            ],
        },
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "REM005"


def test_send_now_and_logs(client, sender_override):
    employee = _create_employee(client)
    type_id = _create_type(client)["id"]
    reminder = client.post(
        "/reminders",
        json={
            "employee_id": employee["id"],
            "reminder_type_id": type_id,
            "due_date": (_today() + dt.timedelta(days=12)).isoformat(),
        },
    ).json()

    resp = client.post(f"/reminders/{reminder['id']}/send")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["days_before"] == 12
    assert body["recipients"] == ["hr@example.com", "boss@example.com"]
    assert sender_override.sender.addresses == ["hr@example.com", "boss@example.com"]

    logs = client.get(f"/reminders/{reminder['id']}/logs").json()
    assert [(log["status"], log["trigger_type"]) for log in logs] == [("sent", "manual")]
    assert client.get(f"/reminders/{reminder['id']}").json()["status"] == "sent"

    repeat = client.post(f"/reminders/{reminder['id']}/send").json()
    assert repeat["success"] is False
    assert repeat["reason"] == "already dispatched"


def test_recurring_definition_crud(client):
    type_id = _create_type(client, "Safety Check")["id"]

    resp = client.post(
        "/recurring-reminders",
        json={"name": "Monthly check", "reminder_type_id": type_id, "next_due_date": "2024-01-31"},
    )
    assert resp.status_code == 201
    definition = resp.json()
    assert definition["frequency"] == "monthly"
    assert definition["anchor_date"] == "2024-01-31"

    assert client.post(
        "/recurring-reminders",
        json={"name": "Bad", "reminder_type_id": type_id, "next_due_date": "2024-01-31", "interval": 0},
    ).status_code == 422
    assert client.post(
        "/recurring-reminders",
        json={"name": "Orphan", "reminder_type_id": 999, "next_due_date": "2024-01-31"},
    ).status_code == 404

    resp = client.patch(f"/recurring-reminders/{definition['id']}", json={"next_due_date": "2024-02-15"})
    assert resp.json()["anchor_date"] == "2024-02-15"
    assert client.delete(f"/recurring-reminders/{definition['id']}").status_code == 204


def test_cron_endpoints(client):
    resp = client.get("/cron/process-reminders")
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["trigger_type"] == "scheduled"

    resp = client.post("/cron/trigger", json={"job_type": "process_recurring"})
    assert resp.status_code == 200
    assert resp.json()["trigger_type"] == "manual"

    assert client.post("/cron/trigger", json={"job_type": "nope"}).status_code == 422

    logs = client.get("/cron/logs").json()
    assert {log["job_type"] for log in logs} == {"process_reminders", "process_recurring"}
    assert all(log["status"] == "completed" for log in logs)
    assert len(client.get("/cron/logs", params={"type": "process_recurring"}).json()) == 1
    assert client.get("/cron/logs", params={"type": "bogus"}).status_code == 400


def test_email_settings_endpoints(client):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/account"):
            return httpx.Response(200, json={"email": "owner@example.com"})
        return httpx.Response(201, json={"messageId": "<t@brevo>"})

    sender = BrevoEmailSender(
        BrevoConfig(
            api_key="xkeysib-test",
            sender_email="noreply@example.com",
            sender_name="Employee Reminder System",
            send_url="https://api.brevo.test/v3/smtp/email",
            account_url="https://api.brevo.test/v3/account",
        ),
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    app.dependency_overrides[dependencies.email_sender] = lambda: sender
    try:
        settings_view = client.get("/settings/email").json()
        assert settings_view["api_key"] == "********"
        assert settings_view["configured"] is True

        check = client.post("/settings/email/test").json()
        assert check == {"success": True, "message": "Successfully connected to Brevo API. Account: owner@example.com"}

        sent = client.post("/settings/email/test-send", json={"to": "admin@example.com"}).json()
        assert sent["success"] is True
        assert sent["message"].startswith("Test email sent successfully to admin@example.com")
    finally:
        app.dependency_overrides.pop(dependencies.email_sender, None)


def test_health_endpoints(client):
    assert client.get("/live").json() == {"status": "alive"}
    assert client.get("/healthz").json() == {"status": "ok"}
