"""
Tick and FreshBooks services.

This package provides the remote API clients and the services built on them:
- XML request encoding and typed response decoding
- Tick and FreshBooks clients with per-request timeouts
- Exponential backoff with jitter for transient failures
- Reconciliation of generated invoices with Tick entries
"""

from .errors import RemoteError, XmlDecodeError
from .freshbooks_client import FreshBooksClient
from .join_store import InMemoryJoinRecordStore, JoinRecordStore, JsonFileJoinRecordStore
from .reconciliation import ReconciliationEngine, ReconciliationReport
from .retry_handler import RetryHandler
from .tick_client import TickClient

__all__ = [
    "RemoteError",
    "XmlDecodeError",
    "RetryHandler",
    "TickClient",
    "FreshBooksClient",
    "JoinRecordStore",
    "InMemoryJoinRecordStore",
    "JsonFileJoinRecordStore",
    "ReconciliationEngine",
    "ReconciliationReport",
]
