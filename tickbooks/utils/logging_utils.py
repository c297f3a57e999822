"""Structured logging utilities with context support."""

import logging
import threading
import uuid
from typing import Any, Dict, Optional, cast

# Thread-local storage for log context
_thread_local = threading.local()

# Request parameters that must never reach a log record
SENSITIVE_FIELDS = {
    "password",
    "token",
    "api_key",
    "secret",
    "credentials",
    "authorization",
}


def generate_correlation_id() -> str:
    """
    Generate a unique correlation ID for tracking one caller request.

    Returns:
        UUID string to use as correlation ID
    """
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    context = getattr(_thread_local, "context", None)
    if context:
        return context.get("correlation_id")
    return None


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Fields are stored in thread-local storage and added to every record
    emitted inside the block by the filter installed in configure_logging().

    Example:
        with LogContext(invoice_id=344):
            logger.info("Checking invoice status")
            # Log will include the invoice_id field
    """

    def __init__(self, **kwargs):
        self.fields = kwargs
        self.previous_context: Optional[Dict[str, Any]] = None

    def __enter__(self):
        if not hasattr(_thread_local, "context"):
            _thread_local.context = {}

        self.previous_context = _thread_local.context.copy()
        _thread_local.context.update(self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.previous_context is not None:
            _thread_local.context = self.previous_context
        else:
            _thread_local.context = {}


class _ContextFilter(logging.Filter):
    """Logging filter that adds context fields to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if hasattr(_thread_local, "context"):
            for key, value in _thread_local.context.items():
                setattr(record, key, value)
        return True


def sanitize_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact sensitive values in a (possibly nested) dictionary.

    Used before request parameters are logged: Tick requests carry the
    account password in their query string.

    Args:
        data: Dictionary to sanitize

    Returns:
        Sanitized copy with sensitive values redacted

    Example:
        >>> sanitize_sensitive_data({"email": "a@b.c", "password": "pw"})
        {'email': 'a@b.c', 'password': '***REDACTED***'}
    """
    if not isinstance(data, dict):
        return data

    sanitized: Dict[str, Any] = {}

    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = "***REDACTED***" if value is not None else None
        elif isinstance(value, dict):
            sanitized[key] = sanitize_sensitive_data(cast(Dict[str, Any], value))
        else:
            sanitized[key] = value

    return sanitized
