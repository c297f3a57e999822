"""Calculator modules for billing resolution and invoice construction."""

from tickbooks.calculators.billing_resolver import BillingResolver, names_match
from tickbooks.calculators.invoice_builder import InvoiceBuilder, InvoiceType

__all__ = [
    # billing_resolver
    "BillingResolver",
    "names_match",
    # invoice_builder
    "InvoiceBuilder",
    "InvoiceType",
]
