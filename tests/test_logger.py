import json
import logging

from reminderly.core.logger import JsonFormatter
from reminderly.workers.worker import worker_argv


def _record(**extra):
    record = logging.makeLogRecord(
        {"name": "reminderly.dispatch", "levelno": logging.INFO, "levelname": "INFO", "msg": "Reminder %s sent"}
    )
    record.args = (7,)
    record.__dict__.update(extra)
    return record


def test_json_lines_carry_service_and_env():
    payload = json.loads(JsonFormatter(service="reminderly", env="prod").format(_record()))

    assert payload["service"] == "reminderly"
    assert payload["env"] == "prod"
    assert payload["message"] == "Reminder 7 sent"
    assert "extra" not in payload


def test_reminder_context_is_top_level():
    record = _record(reminder_id=7, trigger_type="manual", batch="nightly")

    payload = json.loads(JsonFormatter(service="reminderly", env="test").format(record))

    assert payload["reminder_id"] == 7
    assert payload["trigger_type"] == "manual"
    assert payload["extra"] == {"batch": "nightly"}


def test_worker_runs_beat_under_reminderly_hostname():
    argv = worker_argv()

    assert argv[:2] == ["worker", "--beat"]
    assert "--hostname=reminderly@%h" in argv
    assert "--queues=default" in argv
