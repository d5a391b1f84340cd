"""
ComplaintDesk - Logging

One ``complaintdesk`` logger for the whole API. Every record carries the
request id and the calling account (both held in context variables set by
the middleware and the auth dependency), so a complaint's history can be
followed across requests:

    INFO     | [3f2a91bc] [acct 8d1e...] | Complaint updated: c-42 by 8d1e...

Production writes one JSON object per line; other environments write the
readable form above.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
account_id_var: ContextVar[str] = ContextVar('account_id', default='')


def get_request_id() -> str:
    return request_id_var.get() or ''


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_account_id() -> str:
    return account_id_var.get() or ''


def set_account_id(account_id: str) -> None:
    """Bind the authenticated account to everything logged for this request"""
    account_id_var.set(account_id)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


# LogRecord attributes that never belong in the JSON "extra" section
_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'taskName', 'request_id', 'caller'}

_LOG_FILE_MAX_BYTES = 10 * 1024 * 1024


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation in production"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id
        account_id = get_account_id()
        if account_id:
            entry["caller_account_id"] = account_id

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        entry.update({
            key: value for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith('_')
        })

        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Readable format with the request id and caller prefixed"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or '-'
        account_id = get_account_id()
        record.caller = f"acct {account_id}" if account_id else "anonymous"
        return super().format(record)


class ComplaintDeskLogger(logging.Logger):
    """Logger with helpers for the events the API records"""

    def log_auth_event(self, event: str, success: bool, user_email: str = None,
                       reason: str = None, **kwargs) -> None:
        """Sign-up, login and logout outcomes"""
        outcome = "success" if success else "failed"
        parts = [f"Auth {event}: {outcome}", user_email, reason]
        self.log(
            logging.INFO if success else logging.WARNING,
            " - ".join(p for p in parts if p),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_complaint_event(self, event: str, complaint_id: str,
                            account_id: str, **kwargs) -> None:
        """A complaint was created, edited, moved to another status or deleted"""
        self.info(
            f"Complaint {event}: {complaint_id} by {account_id}",
            extra={
                "event_type": "complaint",
                "complaint_event": event,
                "complaint_id": complaint_id,
                "account_id": account_id,
                **kwargs
            }
        )

    def log_access_denied(self, reason: str, path: str, **kwargs) -> None:
        """A caller was refused an action on complaints"""
        self.warning(
            f"Access denied on {path}: {reason}",
            extra={
                "event_type": "access_denied",
                "denied_path": path,
                "denial_reason": reason,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: str = None,
                               **kwargs) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_message": str(error),
                "error_context": context,
                **kwargs
            }
        )


def _file_handler(formatter: logging.Formatter, backup_count: int) -> Optional[logging.Handler]:
    if not settings.LOG_FILE:
        return None
    log_file = Path(settings.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=_LOG_FILE_MAX_BYTES, backupCount=backup_count)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def _build_handlers(json_logging: bool) -> List[logging.Handler]:
    if json_logging:
        console_formatter = file_formatter = JSONFormatter()
        backup_count = 10
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | [%(request_id)s] [%(caller)s] | %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(caller)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )
        backup_count = 5

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(console_formatter)

    handlers = [console]
    file_handler = _file_handler(file_formatter, backup_count)
    if file_handler:
        handlers.append(file_handler)
    return handlers


def setup_logging() -> ComplaintDeskLogger:
    """Configure the ``complaintdesk`` logger for the current environment"""
    logging.setLoggerClass(ComplaintDeskLogger)

    logger = logging.getLogger("complaintdesk")
    logger.__class__ = ComplaintDeskLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    json_logging = settings.ENVIRONMENT == "production"
    logger.handlers.clear()
    for handler in _build_handlers(json_logging):
        logger.addHandler(handler)

    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info(
        "Logging initialized",
        extra={
            "environment": settings.ENVIRONMENT,
            "log_level": settings.LOG_LEVEL,
            "json_logging": json_logging,
        }
    )
    return logger


logger: ComplaintDeskLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'get_request_id',
    'set_request_id',
    'get_account_id',
    'set_account_id',
    'generate_request_id',
    'ComplaintDeskLogger',
]
