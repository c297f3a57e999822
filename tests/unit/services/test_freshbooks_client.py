"""
Unit tests for the FreshBooks client.
"""

from unittest.mock import patch

import pytest
import requests

from tickbooks.models.invoicing import InvoiceLineItem, InvoicePayload
from tickbooks.services.errors import RemoteError
from tickbooks.services.freshbooks_client import FreshBooksClient
from tickbooks.services.retry_handler import RetryHandler
from tickbooks.services.xml_codec import decode


def clients_page(page: int, pages: int, *names: str) -> str:
    clients = "".join(
        f"<client><client_id>{page * 10 + i}</client_id>"
        f"<organization>{name}</organization></client>"
        for i, name in enumerate(names)
    )
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<response xmlns="http://www.freshbooks.com/api/" status="ok">'
        f'<clients page="{page}" per_page="100" pages="{pages}">{clients}</clients>'
        "</response>"
    )


INVOICE_XML = """<?xml version="1.0" encoding="utf-8"?>
<response xmlns="http://www.freshbooks.com/api/" status="ok">
  <invoice>
    <invoice_id>344</invoice_id>
    <status>sent</status>
    <auth_url>https://acme.freshbooks.com/inv/344?auth=x</auth_url>
  </invoice>
</response>"""

FAIL_XML = """<?xml version="1.0" encoding="utf-8"?>
<response xmlns="http://www.freshbooks.com/api/" status="fail">
  <error>Invoice not found.</error>
  <code>50010</code>
</response>"""


class TestFreshBooksClient:
    """Test cases for FreshBooksClient."""

    @pytest.fixture
    def client(self, freshbooks_credentials, mock_session):
        return FreshBooksClient(freshbooks_credentials, session=mock_session)

    def _sent_document(self, mock_session, index=-1):
        call = mock_session.post.call_args_list[index]
        return decode(call.kwargs["data"])

    def test_request_protocol(self, client, mock_session, xml_response):
        """Requests are XML envelopes sent with basic auth and a timeout."""
        mock_session.post.return_value = xml_response(clients_page(1, 1, "Acme"))

        client.list_clients()

        args, kwargs = mock_session.post.call_args
        assert args[0] == "https://acme.freshbooks.com/api/2.1/xml-in"
        assert kwargs["auth"] == ("fb-token", "")
        assert kwargs["timeout"] == 10.0
        assert kwargs["data"].startswith(b"<?xml")

        document = self._sent_document(mock_session)
        assert document.attr("method") == "client.list"
        assert document.int_of("page") == 1
        assert document.int_of("per_page") == 100

    def test_list_clients_page(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response(clients_page(2, 3, "Acme", "Globex"))

        clients, total_pages = client.list_clients(page=2)

        assert total_pages == 3
        assert [c.organization for c in clients] == ["Acme", "Globex"]
        assert self._sent_document(mock_session).int_of("page") == 2

    def test_missing_pages_attribute_defaults_to_one(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response(
            '<response status="ok"><items><item><item_id>1</item_id>'
            "<name>Design</name><unit_cost>80</unit_cost></item></items></response>"
        )

        items, total_pages = client.list_items()

        assert total_pages == 1
        assert items[0].unit_cost == 80.0

    def test_missing_collection_is_empty_page(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response('<response status="ok"></response>')

        assert client.list_tasks() == ([], 1)

    def test_pages_are_one_indexed(self, client):
        with pytest.raises(ValueError):
            client.list_clients(page=0)

    def test_iter_clients_walks_all_pages_in_order(self, client, mock_session, xml_response):
        mock_session.post.side_effect = [
            xml_response(clients_page(1, 3, "A", "B")),
            xml_response(clients_page(2, 3, "C")),
            xml_response(clients_page(3, 3, "D")),
        ]

        names = [c.organization for c in client.iter_clients()]

        assert names == ["A", "B", "C", "D"]
        assert mock_session.post.call_count == 3
        pages = [
            self._sent_document(mock_session, i).int_of("page") for i in range(3)
        ]
        assert pages == [1, 2, 3]

    def test_iter_is_lazy(self, client, mock_session, xml_response):
        """Page N+1 is only requested after page N has been consumed."""
        mock_session.post.side_effect = [
            xml_response(clients_page(1, 2, "A")),
            xml_response(clients_page(2, 2, "B")),
        ]

        iterator = client.iter_clients()
        assert next(iterator).organization == "A"
        assert mock_session.post.call_count == 1

    def test_list_projects_filters_by_client(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response(
            '<response status="ok"><projects pages="1"><project>'
            "<project_id>6</project_id><name>Website</name>"
            "<bill_method>task-rate</bill_method><client_id>13</client_id>"
            "</project></projects></response>"
        )

        projects, _ = client.list_projects(13)

        assert projects[0].bill_method == "task-rate"
        document = self._sent_document(mock_session)
        assert document.attr("method") == "project.list"
        assert document.int_of("client_id") == 13

    def test_list_tasks_project_filter(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response(
            '<response status="ok"><tasks pages="1"></tasks></response>'
        )

        client.list_tasks(project_id=6)
        assert self._sent_document(mock_session).int_of("project_id") == 6

        client.list_tasks()
        assert self._sent_document(mock_session).child("project_id") is None

    def test_get_invoice(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response(INVOICE_XML)

        invoice = client.get_invoice(344)

        assert invoice.invoice_id == 344
        assert invoice.status == "sent"
        assert invoice.auth_url.startswith("https://acme.freshbooks.com/inv/344")
        assert self._sent_document(mock_session).attr("method") == "invoice.get"

    def test_fail_status_raises(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response(FAIL_XML)

        with pytest.raises(RemoteError) as exc_info:
            client.get_invoice(344)

        assert exc_info.value.code == 200
        assert exc_info.value.service == "freshbooks"
        assert exc_info.value.message == (
            "The following FreshBooks error occurred: Invoice not found."
        )

    def test_non_2xx_raises(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response("Unauthorized", status_code=401)

        with pytest.raises(RemoteError) as exc_info:
            client.list_clients()

        assert exc_info.value.is_auth_error
        assert "HTTP Status Code: 401" in exc_info.value.message

    def test_transport_failure(self, client, mock_session):
        mock_session.post.side_effect = requests.exceptions.ConnectTimeout("slow")

        with pytest.raises(RemoteError) as exc_info:
            client.list_items()

        assert exc_info.value.is_transport_failure

    def test_malformed_xml_strict(self, freshbooks_credentials, mock_session, xml_response):
        client = FreshBooksClient(
            freshbooks_credentials, lenient_xml=False, session=mock_session
        )
        mock_session.post.return_value = xml_response("<response>")

        with pytest.raises(RemoteError):
            client.list_clients()

    def test_create_invoice(self, client, mock_session, xml_response):
        mock_session.post.return_value = xml_response(
            '<response status="ok"><invoice_id>345</invoice_id></response>'
        )
        payload = InvoicePayload(
            client_id=13,
            organization="Acme Inc",
            lines=[InvoiceLineItem(description="[Website]", unit_cost=500, quantity=1)],
        )

        invoice = client.create_invoice(payload)

        assert invoice.invoice_id == 345
        assert invoice.status == "draft"
        document = self._sent_document(mock_session)
        assert document.attr("method") == "invoice.create"
        assert document.find("invoice/client_id").text == "13"
        line = document.find("invoice/lines/line")
        assert line.text_of("description") == "[Website]"
        assert line.float_of("unit_cost") == 500

    @pytest.mark.parametrize(
        "body",
        [
            '<response status="ok"></response>',
            '<response status="ok"><invoice_id>0</invoice_id></response>',
            "",
            "<response><invoice_id>",
        ],
    )
    def test_create_invoice_without_id_raises(self, client, mock_session, xml_response, body):
        mock_session.post.return_value = xml_response(body)

        with pytest.raises(RemoteError) as exc_info:
            client.create_invoice(InvoicePayload(client_id=13))

        assert exc_info.value.message == "FreshBooks did not return an invoice id"
        assert exc_info.value.service == "freshbooks"

    def test_reads_are_retried(self, freshbooks_credentials, mock_session, xml_response):
        client = FreshBooksClient(
            freshbooks_credentials,
            session=mock_session,
            retry_handler=RetryHandler(max_retries=1, base_delay=0),
        )
        mock_session.post.side_effect = [
            xml_response("busy", status_code=503),
            xml_response(INVOICE_XML),
        ]

        with patch("time.sleep"):
            assert client.get_invoice(344).invoice_id == 344

    def test_create_invoice_is_never_retried(
        self, freshbooks_credentials, mock_session, xml_response
    ):
        client = FreshBooksClient(
            freshbooks_credentials,
            session=mock_session,
            retry_handler=RetryHandler(max_retries=3, base_delay=0),
        )
        mock_session.post.return_value = xml_response("busy", status_code=503)

        with patch("time.sleep"):
            with pytest.raises(RemoteError):
                client.create_invoice(InvoicePayload(client_id=13))

        mock_session.post.assert_called_once()
