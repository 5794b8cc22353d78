import json
import logging
import sys

from membership.core.logging import JsonFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="membership.services.invitation_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Invitation %s",
        args=("created",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_lifts_correlation_ids_and_keeps_other_extras():
    line = JsonFormatter().format(_record(request_id="req-1", invitation_id="inv-1", role="MANAGER"))
    payload = json.loads(line)

    assert payload["message"] == "Invitation created"
    assert payload["service"] == "membership"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-1"
    assert payload["invitation_id"] == "inv-1"
    assert payload["extra"] == {"role": "MANAGER"}


def test_json_formatter_omits_extra_when_record_has_none():
    payload = json.loads(JsonFormatter().format(_record()))

    assert "extra" not in payload
    assert "exc_info" not in payload


def test_json_formatter_includes_exception_text():
    try:
        raise RuntimeError("db down")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JsonFormatter().format(record))
    assert "RuntimeError: db down" in payload["exc_info"]
