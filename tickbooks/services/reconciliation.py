"""
Reconciliation of generated invoices with their Tick entries.

Invoices created by Tickbooks may later be deleted, sent or paid in
FreshBooks. Before open entries are listed, every recorded invoice is
checked again:

- deleted: its entries are marked unbilled in Tick and their join records
  removed, so the hours can be invoiced again
- no longer a draft: the join records are removed, entries stay billed
- draft: nothing changes, it may still be deleted later
"""

import logging
from dataclasses import dataclass, field
from typing import List

from tickbooks.services.errors import RemoteError
from tickbooks.services.freshbooks_client import FreshBooksClient
from tickbooks.services.join_store import JoinRecordStore
from tickbooks.services.tick_client import TickClient
from tickbooks.utils.logging_utils import LogContext

logger = logging.getLogger(__name__)

STATUS_DELETED = "deleted"
STATUS_DRAFT = "draft"


@dataclass
class ReconciliationReport:
    """Outcome of a reconciliation pass.

    Attributes:
        invoices_checked: Invoice ids whose status was fetched
        entries_unbilled: Entry ids of deleted invoices marked unbilled in Tick
        records_released: Entry ids whose join record was removed
        drafts: Invoice ids still in draft
    """

    invoices_checked: List[int] = field(default_factory=list)
    entries_unbilled: List[int] = field(default_factory=list)
    records_released: List[int] = field(default_factory=list)
    drafts: List[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.records_released)


class ReconciliationEngine:
    """Keeps Tick billed flags and join records consistent with FreshBooks."""

    def __init__(self, freshbooks: FreshBooksClient, tick: TickClient):
        self.freshbooks = freshbooks
        self.tick = tick

    def check_invoice_status(self, invoice_id: int) -> str:
        """
        Fetch the current status of an invoice.

        Any failure to fetch the invoice is reported as ``deleted``; FreshBooks
        answers requests for deleted invoices with an error.
        """
        try:
            return self.freshbooks.get_invoice(invoice_id).status
        except RemoteError as e:
            logger.info(f"Invoice {invoice_id} treated as deleted: {e.message}")
            return STATUS_DELETED

    def _unbill(self, entry_id: int) -> bool:
        try:
            self.tick.set_billed_status(entry_id, False)
        except RemoteError as e:
            # Entries missing from Tick are stale; their records go anyway
            if not e.is_not_found:
                raise
            logger.info(f"Tick entry {entry_id} no longer exists")
            return False
        return True

    def reconcile(self, store: JoinRecordStore) -> ReconciliationReport:
        """
        Check every recorded invoice and repair drift.

        Args:
            store: Join records between Tick entries and FreshBooks invoices

        Returns:
            What was checked and changed

        Raises:
            RemoteError: If unbilling an entry fails for a reason other than
                the entry no longer existing
        """
        report = ReconciliationReport()

        for invoice_id in store.invoice_ids():
            with LogContext(invoice_id=invoice_id):
                status = self.check_invoice_status(invoice_id)
                entry_ids = store.entry_ids_for(invoice_id)
                report.invoices_checked.append(invoice_id)

                if status == STATUS_DELETED:
                    for entry_id in entry_ids:
                        if self._unbill(entry_id):
                            report.entries_unbilled.append(entry_id)
                        store.delete_entry(entry_id)
                        report.records_released.append(entry_id)
                    logger.info(
                        f"Invoice {invoice_id} was deleted, released {len(entry_ids)} entries"
                    )
                elif status != STATUS_DRAFT:
                    for entry_id in entry_ids:
                        store.delete_entry(entry_id)
                        report.records_released.append(entry_id)
                    logger.debug(f"Invoice {invoice_id} is {status}, join records removed")
                else:
                    report.drafts.append(invoice_id)

        return report
