"""
Exceptions raised by the Tick and FreshBooks clients.
"""

from typing import Optional


class RemoteError(Exception):
    """
    Raised for any unsuccessful response from Tick or FreshBooks.

    Attributes:
        code: HTTP status code, or 0 for transport failures (timeouts,
            refused connections, unreadable responses)
        message: Human-readable description, shown to users verbatim
        service: Name of the remote service ("tick" or "freshbooks")
    """

    TRANSPORT_FAILURE = 0

    def __init__(self, code: int, message: str, service: Optional[str] = None):
        self.code = code
        self.message = message
        self.service = service
        super().__init__(message)

    @property
    def is_transport_failure(self) -> bool:
        return self.code == self.TRANSPORT_FAILURE

    @property
    def is_auth_error(self) -> bool:
        """A 401 means the stored credentials are no longer valid."""
        return self.code == 401

    @property
    def is_not_found(self) -> bool:
        return self.code == 404

    def __repr__(self) -> str:
        return (
            f"RemoteError(code={self.code!r}, message={self.message!r}, "
            f"service={self.service!r})"
        )


class XmlDecodeError(ValueError):
    """Raised by strict XML decoding when a document is malformed."""

    pass
