"""
Error classification utilities for distinguishing retryable from fatal errors.
"""

import logging
import socket
from enum import Enum

import requests.exceptions

from tickbooks.services.errors import RemoteError

logger = logging.getLogger(__name__)

_SERVICE_NAMES = {"tick": "Tick", "freshbooks": "FreshBooks"}


class ErrorType(Enum):
    """Classification of error types."""

    RETRYABLE = "retryable"  # Transport failures, 429, 5xx
    FATAL = "fatal"  # Other HTTP errors and API-level failures
    UNKNOWN = "unknown"  # Not a remote error at all


class ErrorClassifier:
    """
    Classifies errors raised while talking to Tick or FreshBooks.

    Features:
    - RemoteError code classification (0 = transport failure)
    - Network error detection for raw ``requests`` exceptions
    - Error description generation for the CLI
    """

    def classify(self, exception: Exception) -> ErrorType:
        """
        Classify an exception into retryable, fatal, or unknown.

        Args:
            exception: The exception to classify

        Returns:
            ErrorType classification
        """
        if isinstance(exception, RemoteError):
            code = exception.code
            if code == RemoteError.TRANSPORT_FAILURE or code == 429:
                return ErrorType.RETRYABLE
            if 500 <= code < 600:
                return ErrorType.RETRYABLE
            # 4xx, and API failures reported inside a 200 response
            return ErrorType.FATAL

        if isinstance(
            exception,
            (
                socket.timeout,
                requests.exceptions.ConnectionError,
                requests.exceptions.Timeout,
            ),
        ):
            return ErrorType.RETRYABLE

        return ErrorType.UNKNOWN

    def is_retryable(self, exception: Exception) -> bool:
        return self.classify(exception) == ErrorType.RETRYABLE

    def get_error_description(self, exception: Exception) -> str:
        """
        Get a human-readable error description.

        Args:
            exception: The exception to describe

        Returns:
            Error description string
        """
        error_type = self.classify(exception)

        if isinstance(exception, RemoteError):
            service = _SERVICE_NAMES.get(exception.service, "Remote service")
            code = exception.code
            if exception.is_transport_failure:
                return f"{service} unreachable (timeout or connection failure) - {error_type.value}"
            if code == 401:
                return f"{service} authentication failed (HTTP 401) - {error_type.value}"
            if code == 429:
                return f"{service} rate limit error (HTTP 429) - {error_type.value}"
            if 500 <= code < 600:
                return f"{service} server error (HTTP {code}) - {error_type.value}"
            if 400 <= code < 500:
                return f"{service} client error (HTTP {code}) - {error_type.value}"
            return f"{service} error: {exception.message} - {error_type.value}"

        if isinstance(exception, (socket.timeout, requests.exceptions.Timeout)):
            return f"Network timeout error - {error_type.value}"

        if isinstance(exception, requests.exceptions.ConnectionError):
            return f"Network connection error - {error_type.value}"

        return f"{type(exception).__name__}: {str(exception)} - {error_type.value}"
