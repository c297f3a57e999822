"""
Caller-facing operations.

Every operation takes the credentials explicitly and returns an
OperationResult instead of raising for remote failures, so web handlers,
jobs and the command line can all present outcomes the same way.

Example:
    >>> result = check_login(credentials)
    >>> if result.requires_reauthentication:
    ...     ask_for_new_password()
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

from tickbooks.calculators.invoice_builder import InvoiceType
from tickbooks.models.credentials import CredentialSet
from tickbooks.models.entry import TimeEntry
from tickbooks.services.errors import RemoteError
from tickbooks.services.freshbooks_client import FreshBooksClient
from tickbooks.services.invoice_workflow import InvoiceWorkflow
from tickbooks.services.join_store import JoinRecordStore
from tickbooks.services.retry_handler import RetryHandler
from tickbooks.services.tick_client import DateLike, TickClient

logger = logging.getLogger(__name__)

NO_CLIENT_MATCH_MESSAGE = (
    "No Client Match Found - Your Tick client was not found in FreshBooks. "
    "Please make sure that you use the same client name for both FreshBooks and Tick."
)


class ResultStatus(str, Enum):
    OK = "ok"
    REMOTE_ERROR = "remote_error"
    NO_MATCH = "no_match"


@dataclass
class OperationResult:
    """
    Tagged result of a caller-facing operation.

    Attributes:
        status: ok, remote_error or no_match
        value: Operation value (present for ok, may be present for no_match)
        error: The RemoteError behind a remote_error result
        message: Text to show the user
    """

    status: ResultStatus
    value: Any = None
    error: Optional[RemoteError] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.OK

    @property
    def requires_reauthentication(self) -> bool:
        """True when stored credentials were rejected (HTTP 401)."""
        return self.error is not None and self.error.is_auth_error

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "OperationResult":
        return cls(status=ResultStatus.OK, value=value, message=message)

    @classmethod
    def failure(cls, error: RemoteError) -> "OperationResult":
        return cls(status=ResultStatus.REMOTE_ERROR, error=error, message=error.message)

    @classmethod
    def no_match(cls, value: Any = None) -> "OperationResult":
        return cls(status=ResultStatus.NO_MATCH, value=value, message=NO_CLIENT_MATCH_MESSAGE)


@dataclass
class ClientOptions:
    """Transport settings shared by both clients.

    Attributes:
        tick_timeout: Tick request timeout in seconds
        freshbooks_timeout: FreshBooks request timeout in seconds
        lenient_xml: Decode malformed XML as empty documents
        max_retries: Retries of transient failures on idempotent calls
        retry_delay: Base delay between retries in seconds
    """

    tick_timeout: float = 15.0
    freshbooks_timeout: float = 10.0
    lenient_xml: bool = True
    max_retries: int = 0
    retry_delay: float = 1.0

    @classmethod
    def from_config(cls, config) -> "ClientOptions":
        return cls(
            tick_timeout=config.tick_timeout,
            freshbooks_timeout=config.freshbooks_timeout,
            lenient_xml=config.lenient_xml_parsing,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )

    def retry_handler(self) -> RetryHandler:
        return RetryHandler(max_retries=self.max_retries, base_delay=self.retry_delay)


def build_tick_client(
    credentials: CredentialSet, options: Optional[ClientOptions] = None
) -> TickClient:
    options = options or ClientOptions()
    return TickClient(
        credentials.time_tracking,
        timeout=options.tick_timeout,
        lenient_xml=options.lenient_xml,
        retry_handler=options.retry_handler(),
    )


def build_workflow(
    credentials: CredentialSet,
    store: JoinRecordStore,
    options: Optional[ClientOptions] = None,
) -> InvoiceWorkflow:
    """Build a workflow with fresh clients for one batch of requests."""
    options = options or ClientOptions()
    freshbooks = FreshBooksClient(
        credentials.invoicing,
        timeout=options.freshbooks_timeout,
        lenient_xml=options.lenient_xml,
        retry_handler=options.retry_handler(),
    )
    return InvoiceWorkflow(build_tick_client(credentials, options), freshbooks, store)


def _run(operation: str, func: Callable[[], Any]) -> OperationResult:
    try:
        return OperationResult.success(func())
    except RemoteError as e:
        logger.warning(f"{operation} failed ({e.service}, code {e.code}): {e.message}")
        return OperationResult.failure(e)


def check_login(
    credentials: CredentialSet, options: Optional[ClientOptions] = None
) -> OperationResult:
    """Check the Tick credentials. The value is True or False."""
    return _run("check_login", build_tick_client(credentials, options).login)


def list_open_projects(
    credentials: CredentialSet,
    store: JoinRecordStore,
    options: Optional[ClientOptions] = None,
) -> OperationResult:
    """Reconcile, then list projects with open entries (list of ProjectWithEntries)."""
    workflow = build_workflow(credentials, store, options)
    return _run("list_open_projects", workflow.list_open_projects)


def prepare_invoice(
    credentials: CredentialSet,
    store: JoinRecordStore,
    project_id: Union[int, str],
    start_date: Optional[DateLike] = None,
    end_date: Optional[DateLike] = None,
    options: Optional[ClientOptions] = None,
) -> OperationResult:
    """Reconcile, then collect a project's open entries (an InvoiceDraft)."""
    workflow = build_workflow(credentials, store, options)
    return _run(
        "prepare_invoice",
        lambda: workflow.prepare_invoice(project_id, start_date, end_date),
    )


def create_invoice(
    credentials: CredentialSet,
    store: JoinRecordStore,
    client_name: str,
    project_name: str,
    entries: Sequence[TimeEntry],
    invoice_type: Union[InvoiceType, str] = InvoiceType.SUMMARY,
    options: Optional[ClientOptions] = None,
) -> OperationResult:
    """
    Create a draft invoice in FreshBooks.

    Returns:
        ok with the InvoiceOutcome, no_match with the outcome when the Tick
        client has no FreshBooks counterpart, or remote_error
    """
    workflow = build_workflow(credentials, store, options)
    result = _run(
        "create_invoice",
        lambda: workflow.create_invoice(client_name, project_name, entries, invoice_type),
    )
    if result.ok and not result.value.created:
        return OperationResult.no_match(result.value)
    if result.ok:
        result.message = "Your invoice was created successfully."
    return result


def reconcile(
    credentials: CredentialSet,
    store: JoinRecordStore,
    options: Optional[ClientOptions] = None,
) -> OperationResult:
    """Reconcile join records with FreshBooks (a ReconciliationReport)."""
    workflow = build_workflow(credentials, store, options)
    return _run("reconcile", workflow.reconcile)
