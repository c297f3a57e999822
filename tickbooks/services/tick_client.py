"""
Tick time tracking API client.

Tick authenticates every request with the account e-mail and password sent
as query parameters, and answers with XML documents.
"""

import datetime as dt
import logging
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import ValidationError

from tickbooks.models.credentials import Credentials
from tickbooks.models.entry import TimeEntry
from tickbooks.services.errors import RemoteError, XmlDecodeError
from tickbooks.services.retry_handler import RetryHandler
from tickbooks.services.xml_codec import XmlNode, decode
from tickbooks.utils.logging_utils import sanitize_sensitive_data

logger = logging.getLogger(__name__)

SERVICE_NAME = "tick"
DEFAULT_TIMEOUT = 15.0
LOOKBACK_YEARS = 5
TICK_DATE_FORMAT = "%m/%d/%Y"

DateLike = Union[dt.date, str]


def years_before(day: dt.date, years: int) -> dt.date:
    """Same calendar day ``years`` earlier; Feb 29 rolls over to Mar 1."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return dt.date(day.year - years, 3, 1)


def format_tick_date(value: DateLike) -> str:
    """Format a date the way Tick expects it (``MM/DD/YYYY``)."""
    if isinstance(value, dt.date):
        return value.strftime(TICK_DATE_FORMAT)
    return value


class TickClient:
    """
    Client for the Tick API.

    Features:
    - Credentials merged into the query string of every request
    - Mandatory per-request timeout
    - Retries of transient failures through RetryHandler
    - Responses decoded into XmlNode trees
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = DEFAULT_TIMEOUT,
        lenient_xml: bool = True,
        session: Optional[requests.Session] = None,
        retry_handler: Optional[RetryHandler] = None,
        today: Optional[dt.date] = None,
    ):
        """
        Initialize the Tick client.

        Args:
            credentials: Tick account URL, e-mail and password
            timeout: Per-request timeout in seconds
            lenient_xml: Decode malformed XML as an empty document
            session: HTTP session (a fresh one by default)
            retry_handler: Retry policy for requests (no retries by default)
            today: Fixed "today" for date defaults (tests)
        """
        self.credentials = credentials
        self.timeout = timeout
        self.lenient_xml = lenient_xml
        self.session = session or requests.Session()
        self.retry_handler = retry_handler or RetryHandler(max_retries=0)
        self._today = today

    def _current_date(self) -> dt.date:
        return self._today or dt.date.today()

    def _send(
        self, method: str, params: Dict[str, Any], lenient: bool
    ) -> XmlNode:
        url = f"{self.credentials.base_url}/api/{method}"
        query = {
            "email": self.credentials.identity,
            "password": self.credentials.secret,
            **params,
        }

        logger.debug(f"Tick request {method}: {sanitize_sensitive_data(query)}")

        try:
            response = self.session.post(url, params=query, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise RemoteError(
                RemoteError.TRANSPORT_FAILURE,
                f"Unable to reach Tick ({type(e).__name__}). "
                "Please check your Tick settings and try again.",
                SERVICE_NAME,
            ) from e

        status = response.status_code
        content_type = response.headers.get("Content-Type", "")
        media_type = content_type.split(";")[0].strip().lower()

        if status == 200 and media_type == "application/xml":
            try:
                return decode(response.content, lenient=lenient)
            except XmlDecodeError as e:
                raise RemoteError(
                    status, f"Malformed response from Tick: {e}", SERVICE_NAME
                ) from e

        # Tick answers some successful updates with a single space
        if status == 200 and media_type == "text/html" and response.text == " ":
            return XmlNode.empty()

        logger.warning(f"Unexpected Tick response to {method}: HTTP {status} ({content_type})")
        raise RemoteError(
            status,
            f"Unexpected response from Tick. HTTP Status Code: {status}",
            SERVICE_NAME,
        )

    def _request(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        lenient: Optional[bool] = None,
    ) -> XmlNode:
        """
        Send a request to the Tick API.

        Args:
            method: Tick API method (e.g. ``entries``)
            params: Method parameters
            lenient: Override the client's lenient XML setting

        Returns:
            Decoded response document

        Raises:
            RemoteError: If the request fails for any reason
        """
        use_lenient = self.lenient_xml if lenient is None else lenient
        return self.retry_handler.execute_with_retry(
            self._send, method, params or {}, use_lenient
        )

    def login(self) -> bool:
        """
        Check the credentials with a harmless ``clients`` listing.

        Returns:
            True if Tick answered with a well-formed document, False on any
            failure (network and authentication failures are not told apart)
        """
        try:
            self._request("clients", lenient=False)
        except RemoteError as e:
            logger.info(f"Tick login failed: {e.message}")
            return False
        return True

    def list_open_entries(
        self,
        project_id: Optional[Union[int, str]] = None,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> List[TimeEntry]:
        """
        List billable entries that are not billed yet.

        Without a date range, every entry updated in the last five years is
        returned. With a start date, Tick filters on the entry date range
        (the end defaults to today).

        Args:
            project_id: Restrict to one Tick project
            start_date: Range start
            end_date: Range end

        Returns:
            Open entries in Tick's order

        Raises:
            RemoteError: If the request fails or an entry cannot be parsed
        """
        today = self._current_date()
        params: Dict[str, Any] = {}

        if start_date is None and end_date is None:
            params["updated_at"] = format_tick_date(years_before(today, LOOKBACK_YEARS))
        else:
            params["start_date"] = format_tick_date(
                start_date if start_date is not None else years_before(today, LOOKBACK_YEARS)
            )
            params["end_date"] = format_tick_date(end_date if end_date is not None else today)

        params["entry_billable"] = "true"
        params["billed"] = "false"

        if project_id:
            params["project_id"] = project_id

        document = self._request("entries", params)
        try:
            entries = [TimeEntry.from_xml(node) for node in document.children_named("entry")]
        except ValidationError as e:
            logger.warning(f"Tick returned an invalid entry: {e}")
            raise RemoteError(
                200, f"Tick returned an invalid time entry: {e.errors()[0]['msg']}", SERVICE_NAME
            ) from e
        logger.info(f"Fetched {len(entries)} open Tick entries")
        return entries

    def set_billed_status(self, entry_id: int, billed: bool) -> XmlNode:
        """
        Mark an entry billed or unbilled. Safe to repeat.

        Args:
            entry_id: Tick entry id
            billed: New billed flag

        Returns:
            Tick's acknowledgement document (may be empty)

        Raises:
            RemoteError: If the update fails; code 404 means the entry no
                longer exists in Tick
        """
        logger.debug(f"Setting Tick entry {entry_id} billed={billed}")
        return self._request(
            "update_entry",
            {"id": entry_id, "billed": "true" if billed else "false"},
        )
