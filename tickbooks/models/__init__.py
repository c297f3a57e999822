"""Data models for Tick entries, FreshBooks records and invoices.

This package contains Pydantic models for all business entities:
- BaseDataModel / FrozenDataModel: Base classes with common configuration
- Credentials / CredentialSet: Explicitly passed service credentials
- TimeEntry and its aggregates: Tick time entries
- FreshBooks records, BillingDetails and invoice payloads
"""

from tickbooks.models.base import BaseDataModel, FrozenDataModel
from tickbooks.models.credentials import Credentials, CredentialSet
from tickbooks.models.entry import (
    NO_TASK_SELECTED,
    InvoiceDraft,
    ProjectWithEntries,
    TaskHours,
    TimeEntry,
)
from tickbooks.models.invoicing import (
    BillingDetails,
    BillingMethod,
    ClientRecord,
    Invoice,
    InvoiceContext,
    InvoiceLineItem,
    InvoicePayload,
    InvoicingItem,
    InvoicingProject,
    InvoicingTask,
    JoinRecord,
)

__all__ = [
    "BaseDataModel",
    "FrozenDataModel",
    "Credentials",
    "CredentialSet",
    "NO_TASK_SELECTED",
    "InvoiceDraft",
    "ProjectWithEntries",
    "TaskHours",
    "TimeEntry",
    "BillingDetails",
    "BillingMethod",
    "ClientRecord",
    "Invoice",
    "InvoiceContext",
    "InvoiceLineItem",
    "InvoicePayload",
    "InvoicingItem",
    "InvoicingProject",
    "InvoicingTask",
    "JoinRecord",
]
