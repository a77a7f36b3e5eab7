from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime, timezone

from jwt_pizza.core.request_context import get_request_context

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_SENSITIVE_PATTERNS = [
    re.compile(r"(authorization\s*[:=]\s*bearer\s+)([^\s\"',}]+)", re.IGNORECASE),
    re.compile(r"(bearer\s+)([A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+)", re.IGNORECASE),
    re.compile(r"(\"?token\"?\s*[:=]\s*\"?)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(\"?jwt\"?\s*[:=]\s*\"?)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(\"?password\"?\s*[:=]\s*\"?)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(\"?secret\"?\s*[:=]\s*\"?)([^\s\",}]+)", re.IGNORECASE),
]

_EXTRA_FIELDS = ("endpoint", "method", "status_code", "log_type", "url", "req_body", "res_body", "token_signature")


def mask_sensitive(value: str) -> str:
    masked = value
    for pattern in _SENSITIVE_PATTERNS:
        masked = pattern.sub(r"\1***", masked)
    return masked


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        context = get_request_context()
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "request_id": getattr(record, "request_id", None) or context.request_id,
            "user_id": getattr(record, "user_id", None) or context.user_id,
            "module": record.name,
            "message": mask_sensitive(record.getMessage()),
            "duration_ms": getattr(record, "duration_ms", None),
        }
        for field_name in _EXTRA_FIELDS:
            value = getattr(record, field_name, None)
            if value is None:
                continue
            if isinstance(value, str):
                value = mask_sensitive(value)
            payload[field_name] = value
        if "token_signature" not in payload and context.token_signature:
            payload["token_signature"] = context.token_signature
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str | None = None) -> None:
    resolved_level = (level or LOG_LEVEL).upper()
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(resolved_level)

    handler = logging.StreamHandler()
    formatter = JsonFormatter("%(message)s")
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(resolved_level)


def status_to_log_level(status_code: int) -> int:
    if status_code >= 500 or status_code <= 0:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO
