import json
import logging
import os
from datetime import datetime, timezone

SERVICE_NAME = "membership"

# Attributes every LogRecord carries; anything else came in through extra={...}.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Correlation keys lifted out of "extra" so log queries can filter on them directly.
_TOP_LEVEL_KEYS = ("request_id", "company_id", "invitation_id", "resource_id")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        for key in _TOP_LEVEL_KEYS:
            if key in extras:
                payload[key] = extras.pop(key)
        if extras:
            payload["extra"] = extras

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        if record.stack_info:
            payload["stack_info"] = record.stack_info

        return json.dumps(payload, default=str)


def configure_logging() -> None:
    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.addHandler(logging.StreamHandler())

    root_logger.setLevel(log_level)
    for handler in root_logger.handlers:
        handler.setFormatter(JsonFormatter())
