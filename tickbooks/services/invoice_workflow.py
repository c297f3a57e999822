"""
End-to-end invoicing workflow.

Ties the Tick and FreshBooks clients, the billing calculators and the join
record store together: list projects with open hours, prepare the entries
of one project, and turn them into a FreshBooks draft invoice.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from tickbooks.aggregators.entry_aggregator import (
    group_hours_by_task,
    projects_with_open_entries,
    sort_entries_by_date,
    total_hours,
)
from tickbooks.calculators.billing_resolver import BillingResolver
from tickbooks.calculators.invoice_builder import InvoiceBuilder, InvoiceType
from tickbooks.models.entry import InvoiceDraft, ProjectWithEntries, TimeEntry
from tickbooks.models.invoicing import (
    BillingDetails,
    Invoice,
    InvoiceContext,
    InvoicePayload,
    JoinRecord,
)
from tickbooks.services.errors import RemoteError
from tickbooks.services.freshbooks_client import FreshBooksClient
from tickbooks.services.join_store import JoinRecordStore
from tickbooks.services.reconciliation import ReconciliationEngine, ReconciliationReport
from tickbooks.services.tick_client import DateLike, TickClient, format_tick_date
from tickbooks.utils.logging_utils import LogContext

logger = logging.getLogger(__name__)


@dataclass
class InvoiceOutcome:
    """Result of an invoice creation attempt.

    Attributes:
        billing: Billing details the invoice was built from
        invoice: The created invoice, None when no FreshBooks client matched
        payload: The submitted payload, None when nothing was submitted
        entry_ids: Tick entries covered by the invoice
        unbilled_entry_ids: Entries that could not be marked billed in Tick
    """

    billing: BillingDetails
    invoice: Optional[Invoice] = None
    payload: Optional[InvoicePayload] = None
    entry_ids: List[int] = field(default_factory=list)
    unbilled_entry_ids: List[int] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.invoice is not None


class InvoiceWorkflow:
    """
    Orchestrates Tick, FreshBooks and the join record store.

    Features:
    - Reconciliation before every listing of open entries
    - Billing resolution and summary/detailed invoice construction
    - Join records written for every invoiced entry
    - Entries marked billed in Tick once the invoice exists
    """

    def __init__(
        self,
        tick: TickClient,
        freshbooks: FreshBooksClient,
        store: JoinRecordStore,
    ):
        self.tick = tick
        self.freshbooks = freshbooks
        self.store = store
        self.resolver = BillingResolver(freshbooks)
        self.builder = InvoiceBuilder(self.resolver)
        self.reconciliation = ReconciliationEngine(freshbooks, tick)

    def reconcile(self) -> ReconciliationReport:
        report = self.reconciliation.reconcile(self.store)
        if report.changed:
            logger.info(
                f"Reconciled {len(report.invoices_checked)} invoices, "
                f"released {len(report.records_released)} entries"
            )
        return report

    def list_open_projects(self) -> List[ProjectWithEntries]:
        """
        List the Tick projects that still have open billable entries.

        Raises:
            RemoteError: If Tick or FreshBooks fail
        """
        self.reconcile()
        entries = self.tick.list_open_entries()
        return projects_with_open_entries(entries)

    def prepare_invoice(
        self,
        project_id: Union[int, str],
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> InvoiceDraft:
        """
        Collect the open entries of a project for invoicing.

        Args:
            project_id: Tick project id
            start_date: Optional range start
            end_date: Optional range end

        Returns:
            Entries sorted by date with total hours and hours per task

        Raises:
            RemoteError: If Tick or FreshBooks fail
        """
        self.reconcile()
        entries = sort_entries_by_date(
            self.tick.list_open_entries(project_id, start_date, end_date)
        )

        return InvoiceDraft(
            project_id=str(project_id),
            entries=entries,
            total_hours=total_hours(entries),
            task_hours=group_hours_by_task(entries),
            start_date=format_tick_date(start_date) if start_date is not None else None,
            end_date=format_tick_date(end_date) if end_date is not None else None,
        )

    def create_invoice(
        self,
        client_name: str,
        project_name: str,
        entries: Sequence[TimeEntry],
        invoice_type: Union[InvoiceType, str] = InvoiceType.SUMMARY,
    ) -> InvoiceOutcome:
        """
        Create a FreshBooks draft invoice for Tick entries.

        Args:
            client_name: Tick client name, matched against FreshBooks clients
            project_name: Tick project name, matched against FreshBooks projects
            entries: Entries to invoice
            invoice_type: ``summary`` or ``detailed``

        Returns:
            The outcome; ``created`` is False when no FreshBooks client matched

        Raises:
            RemoteError: If resolving billing or creating the invoice fails
        """
        entry_ids = [entry.entry_id for entry in entries]
        billing = self.resolver.resolve_billing(client_name, project_name)

        if not billing.is_match:
            return InvoiceOutcome(billing=billing, entry_ids=entry_ids)

        context = InvoiceContext.from_billing(
            billing, client_name, project_name, total_hours(entries)
        )
        payload = self.builder.build(
            InvoiceType(invoice_type), context, group_hours_by_task(entries)
        )
        invoice = self.freshbooks.create_invoice(payload)

        with LogContext(invoice_id=invoice.invoice_id):
            self.store.add_many(
                JoinRecord(entry_id=entry_id, invoice_id=invoice.invoice_id)
                for entry_id in entry_ids
            )

            unbilled = []
            for entry_id in entry_ids:
                try:
                    self.tick.set_billed_status(entry_id, True)
                except RemoteError as e:
                    # Reconciliation unbills them if the invoice is deleted
                    logger.warning(f"Could not mark Tick entry {entry_id} billed: {e.message}")
                    unbilled.append(entry_id)

            try:
                invoice = self.freshbooks.get_invoice(invoice.invoice_id)
            except RemoteError as e:
                logger.warning(f"Could not fetch invoice link: {e.message}")

            logger.info(
                f"Invoiced {len(entry_ids)} entries of '{project_name}' "
                f"({InvoiceType(invoice_type).value}, total {payload.total})"
            )

        return InvoiceOutcome(
            billing=billing,
            invoice=invoice,
            payload=payload,
            entry_ids=entry_ids,
            unbilled_entry_ids=unbilled,
        )
