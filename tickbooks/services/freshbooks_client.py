"""
FreshBooks API client.

Every call POSTs a complete XML request document to a single endpoint,
authenticated with HTTP Basic auth (API token as username, empty password).
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, TypeVar

import requests

from tickbooks.models.credentials import Credentials
from tickbooks.models.invoicing import (
    ClientRecord,
    Invoice,
    InvoicePayload,
    InvoicingItem,
    InvoicingProject,
    InvoicingTask,
)
from tickbooks.services.errors import RemoteError, XmlDecodeError
from tickbooks.services.retry_handler import RetryHandler
from tickbooks.services.xml_codec import XmlNode, build_request_document, decode

logger = logging.getLogger(__name__)

SERVICE_NAME = "freshbooks"
DEFAULT_TIMEOUT = 10.0
PER_PAGE = 100

T = TypeVar("T")
Page = Tuple[List[T], int]


class FreshBooksClient:
    """
    Client for the FreshBooks XML API.

    Features:
    - XML request envelopes built with the XML codec
    - Mandatory per-request timeout
    - Paginated listings (100 per page) with sequential full traversal
    - Retries of transient failures for read-only calls only
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = DEFAULT_TIMEOUT,
        lenient_xml: bool = True,
        session: Optional[requests.Session] = None,
        retry_handler: Optional[RetryHandler] = None,
    ):
        """
        Initialize the FreshBooks client.

        Args:
            credentials: API endpoint URL and API token
            timeout: Per-request timeout in seconds
            lenient_xml: Decode malformed XML as an empty document
            session: HTTP session (a fresh one by default)
            retry_handler: Retry policy for read-only calls (none by default)
        """
        self.credentials = credentials
        self.timeout = timeout
        self.lenient_xml = lenient_xml
        self.session = session or requests.Session()
        self.retry_handler = retry_handler or RetryHandler(max_retries=0)

    def _send(self, method: str, args: Mapping[str, Any]) -> XmlNode:
        document = build_request_document(method, args)
        logger.debug(f"FreshBooks request {method}")

        try:
            response = self.session.post(
                self.credentials.base_url,
                data=document.encode("utf-8"),
                auth=(self.credentials.identity, self.credentials.secret),
                headers={"Content-Type": "application/xml"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteError(
                RemoteError.TRANSPORT_FAILURE,
                f"Unable to connect to the FreshBooks API ({type(e).__name__}). "
                "Please check your FreshBooks API URL setting and try again.",
                SERVICE_NAME,
            ) from e

        status = response.status_code
        if not 200 <= status < 300:
            logger.warning(f"FreshBooks {method} failed with HTTP {status}")
            raise RemoteError(
                status,
                f"Unable to connect to the FreshBooks API. HTTP Status Code: {status}. "
                "Please check your FreshBooks API URL setting and try again. "
                "The FreshBooks API URL is different from your FreshBooks account URL.",
                SERVICE_NAME,
            )

        try:
            root = decode(response.content, lenient=self.lenient_xml)
        except XmlDecodeError as e:
            raise RemoteError(
                status, f"Malformed response from FreshBooks: {e}", SERVICE_NAME
            ) from e

        if root.attr("status") == "fail":
            error_text = root.text_of("error").strip()
            logger.warning(f"FreshBooks {method} returned an error: {error_text}")
            raise RemoteError(
                status,
                f"The following FreshBooks error occurred: {error_text}",
                SERVICE_NAME,
            )

        return root

    def _request(self, method: str, args: Mapping[str, Any]) -> XmlNode:
        """Send a read-only request, retrying transient failures."""
        return self.retry_handler.execute_with_retry(self._send, method, args)

    def _list_page(
        self,
        method: str,
        collection: str,
        element: str,
        parse: Callable[[XmlNode], T],
        args: Dict[str, Any],
        page: int,
    ) -> Page:
        if page < 1:
            raise ValueError(f"Pages are 1-indexed, got {page}")

        root = self._request(method, {**args, "page": page, "per_page": PER_PAGE})
        container = root.child(collection)
        if container is None:
            return [], 1

        records = [parse(node) for node in container.children_named(element)]
        try:
            total_pages = max(int(container.attr("pages", "1")), 1)
        except ValueError:
            total_pages = 1
        return records, total_pages

    @staticmethod
    def _iterate(fetch_page: Callable[[int], Page]) -> Iterator[T]:
        """Yield records from every page, fetching page N+1 only after page N."""
        page = 1
        total_pages = 1
        while page <= total_pages:
            records, pages = fetch_page(page)
            if page == 1:
                total_pages = pages
            yield from records
            page += 1

    def list_clients(self, page: int = 1) -> Page:
        """Return one page of clients and the total page count."""
        return self._list_page(
            "client.list", "clients", "client", ClientRecord.from_xml, {}, page
        )

    def list_projects(self, client_id: int, page: int = 1) -> Page:
        """Return one page of a client's projects and the total page count."""
        return self._list_page(
            "project.list",
            "projects",
            "project",
            InvoicingProject.from_xml,
            {"client_id": client_id},
            page,
        )

    def list_tasks(self, project_id: Optional[int] = None, page: int = 1) -> Page:
        """Return one page of tasks (of one project when given) and the total page count."""
        args: Dict[str, Any] = {}
        if project_id:
            args["project_id"] = project_id
        return self._list_page(
            "task.list", "tasks", "task", InvoicingTask.from_xml, args, page
        )

    def list_items(self, page: int = 1) -> Page:
        """Return one page of items and the total page count."""
        return self._list_page(
            "item.list", "items", "item", InvoicingItem.from_xml, {}, page
        )

    def iter_clients(self) -> Iterator[ClientRecord]:
        return self._iterate(self.list_clients)

    def iter_projects(self, client_id: int) -> Iterator[InvoicingProject]:
        return self._iterate(lambda page: self.list_projects(client_id, page))

    def iter_tasks(self, project_id: Optional[int] = None) -> Iterator[InvoicingTask]:
        return self._iterate(lambda page: self.list_tasks(project_id, page))

    def iter_items(self) -> Iterator[InvoicingItem]:
        return self._iterate(self.list_items)

    def get_invoice(self, invoice_id: int) -> Invoice:
        """
        Fetch an invoice.

        Raises:
            RemoteError: If the request fails or FreshBooks reports an error
                (for example because the invoice was deleted)
        """
        root = self._request("invoice.get", {"invoice_id": invoice_id})
        node = root.child("invoice")
        if node is None:
            raise RemoteError(
                404, f"FreshBooks returned no invoice {invoice_id}", SERVICE_NAME
            )
        return Invoice.from_xml(node)

    def create_invoice(self, payload: InvoicePayload) -> Invoice:
        """
        Create a draft invoice. Never retried, to avoid duplicate invoices.

        Returns:
            The new invoice; FreshBooks only returns its id, so the status is
            taken from the payload and ``auth_url`` is empty until fetched

        Raises:
            RemoteError: If the request fails, FreshBooks rejects the invoice
                or the response carries no invoice id
        """
        root = self._send("invoice.create", payload.to_request())
        invoice_id = root.int_of("invoice_id")
        if invoice_id <= 0:
            logger.error("FreshBooks accepted invoice.create without returning an invoice id")
            raise RemoteError(200, "FreshBooks did not return an invoice id", SERVICE_NAME)

        logger.info(
            f"Created FreshBooks invoice {invoice_id} with {len(payload.lines)} line(s)"
        )
        return Invoice(invoice_id=invoice_id, status=payload.status)
