"""FreshBooks record models and invoice payloads.

Read-only records (clients, projects, tasks, items, invoices) are parsed
from FreshBooks XML responses. Invoice payloads are built locally and
serialized into the argument mapping of an ``invoice.create`` request.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import Field

from tickbooks.models.base import BaseDataModel, FrozenDataModel

if TYPE_CHECKING:
    from tickbooks.services.xml_codec import XmlNode


class BillingMethod(str, Enum):
    """How the unit cost of an invoice line is computed."""

    FLAT_RATE = "flat-rate"
    TASK_RATE = "task-rate"
    PROJECT_RATE = "project-rate"
    STAFF_RATE = "staff-rate"
    NO_PROJECT_FOUND = "no-project-found"

    @classmethod
    def from_remote(cls, value: str) -> Optional["BillingMethod"]:
        """Parse a FreshBooks ``bill_method`` value, None if unknown."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ClientRecord(FrozenDataModel):
    """A FreshBooks client."""

    client_id: int
    organization: str = ""

    @classmethod
    def from_xml(cls, node: "XmlNode") -> "ClientRecord":
        return cls(
            client_id=node.int_of("client_id"),
            organization=node.text_of("organization"),
        )


class InvoicingProject(FrozenDataModel):
    """A FreshBooks project with its billing method and rate."""

    project_id: int
    client_id: int = 0
    name: str = ""
    bill_method: str = ""
    rate: float = 0.0

    @classmethod
    def from_xml(cls, node: "XmlNode") -> "InvoicingProject":
        return cls(
            project_id=node.int_of("project_id"),
            client_id=node.int_of("client_id"),
            name=node.text_of("name"),
            bill_method=node.text_of("bill_method").strip(),
            rate=node.float_of("rate"),
        )


class InvoicingTask(FrozenDataModel):
    """A FreshBooks task and its hourly rate."""

    task_id: int
    name: str = ""
    rate: float = 0.0

    @classmethod
    def from_xml(cls, node: "XmlNode") -> "InvoicingTask":
        return cls(
            task_id=node.int_of("task_id"),
            name=node.text_of("name"),
            rate=node.float_of("rate"),
        )


class InvoicingItem(FrozenDataModel):
    """A FreshBooks item (names are limited to 15 characters)."""

    item_id: int
    name: str = ""
    unit_cost: float = 0.0
    description: str = ""

    @classmethod
    def from_xml(cls, node: "XmlNode") -> "InvoicingItem":
        return cls(
            item_id=node.int_of("item_id"),
            name=node.text_of("name"),
            unit_cost=node.float_of("unit_cost"),
            description=node.text_of("description"),
        )


class BillingDetails(FrozenDataModel):
    """Result of matching a Tick client/project against FreshBooks.

    ``no-project-found`` with rate 0, no client id and project id 0 is the
    "no match" sentinel; it is a valid value, not an error.

    Example:
        >>> BillingDetails.no_match().billing_method
        <BillingMethod.NO_PROJECT_FOUND: 'no-project-found'>
    """

    billing_method: BillingMethod
    billing_rate: float = 0.0
    client_id: Optional[int] = None
    project_id: int = 0

    @classmethod
    def no_match(cls) -> "BillingDetails":
        return cls(
            billing_method=BillingMethod.NO_PROJECT_FOUND,
            billing_rate=0.0,
            client_id=None,
            project_id=0,
        )

    @property
    def is_match(self) -> bool:
        return self.client_id is not None


class InvoiceContext(BaseDataModel):
    """General invoice data shared by every line of an invoice.

    Attributes:
        client_id: FreshBooks client id the invoice is issued to
        client_name: Organization name printed on the invoice
        project_name: Project name used in line descriptions
        project_id: FreshBooks project id used for task rate lookups
        project_rate: FreshBooks project rate
        billing_method: FreshBooks project billing method
        total_hours: Total hours being invoiced (informational)
    """

    client_id: Optional[int] = None
    client_name: str = ""
    project_name: str
    project_id: int = 0
    project_rate: float = 0.0
    billing_method: BillingMethod
    total_hours: float = 0.0

    @classmethod
    def from_billing(
        cls,
        billing: BillingDetails,
        client_name: str,
        project_name: str,
        total_hours: float = 0.0,
    ) -> "InvoiceContext":
        return cls(
            client_id=billing.client_id,
            client_name=client_name,
            project_name=project_name,
            project_id=billing.project_id,
            project_rate=billing.billing_rate,
            billing_method=billing.billing_method,
            total_hours=total_hours,
        )


class InvoiceLineItem(FrozenDataModel):
    """One line of an invoice."""

    description: str
    unit_cost: float
    quantity: float

    def to_request(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "unit_cost": self.unit_cost,
            "quantity": self.quantity,
        }


class InvoicePayload(FrozenDataModel):
    """Invoice to be created in FreshBooks, always as a draft."""

    client_id: Optional[int] = None
    status: str = "draft"
    organization: str = ""
    lines: List[InvoiceLineItem] = Field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(line.unit_cost * line.quantity for line in self.lines)

    def to_request(self) -> Dict[str, Any]:
        """Build the ``invoice.create`` argument mapping."""
        return {
            "invoice": {
                "client_id": self.client_id,
                "status": self.status,
                "organization": self.organization,
                "lines": {"line": [line.to_request() for line in self.lines]},
            }
        }


class Invoice(FrozenDataModel):
    """A FreshBooks invoice as returned by ``invoice.get``/``invoice.create``."""

    invoice_id: int
    status: str = ""
    auth_url: str = ""

    @classmethod
    def from_xml(cls, node: "XmlNode") -> "Invoice":
        auth_url = node.text_of("auth_url")
        if not auth_url:
            auth_url = node.text_of("links/client_view")
        return cls(
            invoice_id=node.int_of("invoice_id"),
            status=node.text_of("status"),
            auth_url=auth_url,
        )


class JoinRecord(FrozenDataModel):
    """Links a billed Tick entry to the FreshBooks invoice that billed it."""

    entry_id: int
    invoice_id: int
