"""
e-Voting API - Centralized Logging Configuration

One "evoting" logger for the whole service:
- development: readable lines tagged with [request_id] [user_id]
- production: one JSON object per line

Ballot and verification outcomes go through dedicated helpers so they can be
filtered by event_type. Candidate choices are never logged.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.config import settings


LOGGER_NAME = "evoting"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024

# Per-request correlation, set by RequestLoggingMiddleware and get_current_user
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')

# Outcomes that must reach the log even when LOG_LEVEL is raised
AUDIT_EVENTS = {"auth", "vote", "verification"}

_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'taskName', 'request_id', 'user_id'}


def get_request_id() -> str:
    return request_id_var.get() or ''


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_user_id() -> str:
    return user_id_var.get() or ''


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def generate_request_id() -> str:
    """Short id echoed back in X-Request-ID"""
    return uuid.uuid4().hex[:8]


class JSONFormatter(logging.Formatter):
    """Structured lines for log aggregation; extra= fields are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if get_request_id():
            entry["request_id"] = get_request_id()
        if get_user_id():
            entry["user_id"] = get_user_id()

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        entry.update({
            key: value for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith('_')
        })
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain text with the request and user ids filled in"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or '-'
        record.user_id = get_user_id() or '-'
        return super().format(record)


class EVotingLogger(logging.Logger):
    """Logger with helpers for the events the service audits"""

    def _event(self, success: bool, message: str, event_type: str, **fields) -> None:
        level = logging.INFO if success else logging.WARNING
        if event_type in AUDIT_EVENTS and not self.isEnabledFor(level):
            level = logging.WARNING if self.isEnabledFor(logging.WARNING) else logging.ERROR
        self.log(level, message, extra={"event_type": event_type, **fields})

    def log_request(self, method: str, path: str, status_code: int, duration_ms: float) -> None:
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self.log(
            level,
            f"{method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **fields) -> None:
        outcome = "success" if success else "failed"
        suffix = "".join(f" - {part}" for part in (user_email, reason) if part)
        self._event(
            success, f"Auth {event}: {outcome}{suffix}", "auth",
            auth_event=event, user_email=user_email, failure_reason=reason, **fields,
        )

    def log_vote_event(self, user_id: str, position_id: str, accepted: bool,
                       reason: Optional[str] = None) -> None:
        outcome = "accepted" if accepted else f"rejected ({reason})"
        self._event(
            accepted, f"Ballot {outcome}: user={user_id} position={position_id}", "vote",
            vote_user_id=user_id, vote_position_id=position_id, rejection_reason=reason,
        )

    def log_verification_event(self, user_id: str, step: str, success: bool,
                               reason: Optional[str] = None) -> None:
        outcome = "passed" if success else f"failed ({reason or 'no reason'})"
        self._event(
            success, f"Verification step '{step}' {outcome} for user {user_id}", "verification",
            verification_step=step, verification_user_id=user_id, failure_reason=reason,
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None) -> None:
        self.error(
            f"Unhandled {type(error).__name__} in {context}: {error}",
            exc_info=True,
            extra={"event_type": "error", "error_type": type(error).__name__, "error_context": context},
        )


def _file_handler(formatter: logging.Formatter, backups: int) -> RotatingFileHandler:
    path = Path(settings.LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=backups)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> EVotingLogger:
    """Build the "evoting" logger for the current environment"""
    logging.setLoggerClass(EVotingLogger)
    logger = logging.getLogger(LOGGER_NAME)
    logger.__class__ = EVotingLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    json_logging = settings.ENVIRONMENT == "production"
    if json_logging:
        console_formatter = file_formatter = JSONFormatter()
        backups = 10
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )
        backups = 5

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(console_formatter)
    logger.addHandler(console)

    if settings.LOG_FILE and not settings.TESTING:
        logger.addHandler(_file_handler(file_formatter, backups))

    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "botocore", "pdfminer"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(f"Logging initialized (environment={settings.ENVIRONMENT}, json={json_logging})")
    return logger


logger: EVotingLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'get_request_id',
    'set_request_id',
    'get_user_id',
    'set_user_id',
    'generate_request_id',
    'EVotingLogger',
    'JSONFormatter',
    'AUDIT_EVENTS',
]
