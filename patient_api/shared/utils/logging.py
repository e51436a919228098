# 📄 File: patient_api/shared/utils/logging.py

# 🧭 Purpose (Layman Explanation):
# This file sets up a logging system that records what happens in the app in a structured way,
# so payments, emails and questionnaire saves can be traced back to the request that caused them.

# 🧪 Purpose (Technical Summary):
# Structured logging with python-json-logger output, request/user context variables,
# a plain-text contextual formatter for local development, and request timing helpers.

# 🔗 Dependencies:
# - python-json-logger: JSON log formatting
# - logging: Python standard logging
# - contextvars: Request context tracking

# 🔄 Connected Modules / Calls From:
# Used by: patient_api.main (startup), RequestLoggingMiddleware, authentication dependency,
# and every module that logs through logging.getLogger(__name__)

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter

from patient_api.shared.config.settings import get_settings

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')

_logging_configured = False


class ContextFilter(logging.Filter):
    """
    Attaches request ID, user ID, service and hostname to every record
    so both formatters can reference them.
    """

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name
        self.hostname = os.uname().nodename if hasattr(os, 'uname') else 'unknown'

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        record.user_id = user_id_var.get()
        record.service = self.service_name
        record.hostname = self.hostname
        return True


class ContextualFormatter(logging.Formatter):
    """
    Plain-text formatter that prefixes each line with the request ID when one is bound.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        request_id = getattr(record, 'request_id', '')
        if request_id:
            return f"[{request_id}] {message}"
        return message


class JSONFormatter(JsonFormatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per line with a consistent structure for
    log aggregation, including any ``extra`` fields passed to the logger.
    """

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        # Empty context values are noise
        for key in ('request_id', 'user_id'):
            if not log_record.get(key):
                log_record.pop(key, None)


class PerformanceLogger:
    """
    Logger for request timing information.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
        extra: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log HTTP request performance."""
        fields = {
            'event_type': 'http_request',
            'method': method,
            'path': path,
            'status_code': status_code,
            'duration_ms': round(duration_ms, 2),
            **(extra or {})
        }

        level = logging.WARNING if status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            f"HTTP {method} {path} - {status_code} - {duration_ms:.2f}ms",
            extra=fields
        )


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
    enable_console: bool = True
) -> logging.Logger:
    """
    Setup application logging configuration.

    Args:
        log_level: Level name, defaults to settings.LOG_LEVEL
        log_format: ``json`` or ``text``, defaults to settings.LOG_FORMAT
        log_file: Optional file to log to in addition to the console
        enable_console: Whether to log to stdout

    Returns:
        logging.Logger: The startup logger
    """
    global _logging_configured

    if _logging_configured:
        return logging.getLogger("startup")

    settings = get_settings()
    log_level = log_level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT
    log_file = log_file or settings.LOG_FILE

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format.lower() == 'json':
        formatter: logging.Formatter = JSONFormatter('%(message)s %(service)s %(request_id)s %(user_id)s')
    else:
        formatter = ContextualFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    context_filter = ContextFilter(settings.SERVICE_NAME)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(context_filter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        root_logger.addHandler(file_handler)

    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('hpack').setLevel(logging.WARNING)
    logging.getLogger('stripe').setLevel(logging.WARNING)
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    _logging_configured = True
    return logging.getLogger("startup")


@contextmanager
def log_context(request_id: Optional[str] = None, user_id: Optional[str] = None):
    """
    Context manager for adding contextual information to logs.

    Args:
        request_id: Request identifier, generated when omitted
        user_id: User identifier
    """
    if request_id is None:
        request_id = str(uuid4())

    request_token = request_id_var.set(request_id)
    user_token = user_id_var.set(user_id or '')

    try:
        yield {'request_id': request_id, 'user_id': user_id}
    finally:
        request_id_var.reset(request_token)
        user_id_var.reset(user_token)


def bind_user(user_id: str) -> None:
    """Bind the authenticated user to the current request's log context."""
    user_id_var.set(user_id)


def log_startup_event(service_name: str, version: str, extra: Optional[Dict[str, Any]] = None) -> None:
    """Log application startup."""
    logging.getLogger("startup").info(
        f"{service_name} v{version} starting up",
        extra={'event_type': 'startup', 'version': version, **(extra or {})}
    )


def log_shutdown_event(service_name: str, extra: Optional[Dict[str, Any]] = None) -> None:
    """Log application shutdown."""
    logging.getLogger("startup").info(
        f"{service_name} shutting down",
        extra={'event_type': 'shutdown', **(extra or {})}
    )
