"""
Logging setup: JSON records for production, plain lines for development.

Every handler carries a TokenRedactionFilter so that a plaintext bearer
token ("<id>|<secret>" or an Authorization header value) never reaches the
log output, whichever module logged it.
"""

import logging
import re
import sys
from typing import Any, Dict
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger

REDACTED = "[redacted]"

_BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)
_PLAINTEXT_TOKEN_PATTERN = re.compile(r"\b(\d+\|)[A-Za-z0-9_\-]{20,}")


def redact_tokens(text: str) -> str:
    text = _BEARER_PATTERN.sub(rf"\1{REDACTED}", text)
    return _PLAINTEXT_TOKEN_PATTERN.sub(rf"\1{REDACTED}", text)


class TokenRedactionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_tokens(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class AuthflowJsonFormatter(jsonlogger.JsonFormatter):
    def __init__(self, *args, service: str = "authflow", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace('+00:00', 'Z')
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['service'] = self.service

        if record.levelno >= logging.WARNING:
            log_record['location'] = f"{record.module}.{record.funcName}:{record.lineno}"


def setup_logging(log_level: str = "INFO", json_logs: bool = True, service: str = "authflow") -> None:
    """
    Configure the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: JSON records (production) instead of plain text lines
        service: Value of the "service" field on JSON records
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(TokenRedactionFilter())

    if json_logs:
        formatter = AuthflowJsonFormatter('%(timestamp)s %(level)s %(logger)s %(message)s', service=service)
    else:
        formatter = logging.Formatter(
            '%(asctime)s %(levelname)-7s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(formatter)

    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.addHandler(console_handler)

    for name in ("botocore", "boto3", "httpx", "kombu"):
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
