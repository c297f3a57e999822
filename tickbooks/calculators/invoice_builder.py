"""Invoice payload construction.

Two invoice layouts are supported:

- summary: a single line for the whole project
- detailed: one line per Tick task with the task's hours as quantity

Flat-rate projects are billed the project rate once. In the detailed layout
the flat-rate line is appended after the itemised lines, which then cost 0.
"""

import logging
from enum import Enum
from typing import Dict, List, Sequence

from tickbooks.calculators.billing_resolver import BillingResolver
from tickbooks.models.entry import NO_TASK_SELECTED, TaskHours
from tickbooks.models.invoicing import (
    BillingMethod,
    InvoiceContext,
    InvoiceLineItem,
    InvoicePayload,
)

logger = logging.getLogger(__name__)


class InvoiceType(str, Enum):
    """Invoice layout requested by the user."""

    SUMMARY = "summary"
    DETAILED = "detailed"


def project_label(project_name: str) -> str:
    """Bracketed project name that prefixes every line description."""
    return f"[{project_name}]"


def flat_rate_line(context: InvoiceContext) -> InvoiceLineItem:
    return InvoiceLineItem(
        description=f"{project_label(context.project_name)} Flat Rate",
        unit_cost=context.project_rate,
        quantity=1,
    )


class InvoiceBuilder:
    """Builds FreshBooks invoice payloads from hours grouped by task.

    Unit costs come from the BillingResolver and are looked up at most once
    per task name within a single build.
    """

    def __init__(self, resolver: BillingResolver):
        self.resolver = resolver

    def _unit_cost_lookup(self, context: InvoiceContext):
        costs: Dict[str, float] = {}

        def unit_cost(task_name: str) -> float:
            if task_name not in costs:
                costs[task_name] = self.resolver.resolve_unit_cost(
                    context.billing_method,
                    task_name,
                    context.project_rate,
                    context.project_id,
                )
            return costs[task_name]

        return unit_cost

    def _payload(self, context: InvoiceContext, lines: List[InvoiceLineItem]) -> InvoicePayload:
        return InvoicePayload(
            client_id=context.client_id,
            status="draft",
            organization=context.client_name,
            lines=lines,
        )

    def build_summary(
        self, context: InvoiceContext, line_items: Sequence[TaskHours]
    ) -> InvoicePayload:
        """Build a single-line invoice.

        Args:
            context: General invoice data
            line_items: Hours grouped by task

        Returns:
            Draft invoice payload with exactly one line
        """
        if context.billing_method == BillingMethod.FLAT_RATE:
            return self._payload(context, [flat_rate_line(context)])

        unit_cost = self._unit_cost_lookup(context)
        amount = sum(item.hours * unit_cost(item.task_name) for item in line_items)

        logger.debug(
            f"Summary invoice for {context.project_name}: {len(line_items)} task(s), amount {amount}"
        )
        line = InvoiceLineItem(
            description=project_label(context.project_name),
            unit_cost=amount,
            quantity=1,
        )
        return self._payload(context, [line])

    def build_detailed(
        self, context: InvoiceContext, line_items: Sequence[TaskHours]
    ) -> InvoicePayload:
        """Build an invoice with one line per task.

        Args:
            context: General invoice data
            line_items: Hours grouped by task

        Returns:
            Draft invoice payload; flat-rate projects get an extra flat-rate
            line after the itemised ones
        """
        unit_cost = self._unit_cost_lookup(context)
        lines = []

        for item in line_items:
            description = f"{project_label(context.project_name)}  "
            if item.task_name != NO_TASK_SELECTED:
                description += item.task_name

            lines.append(
                InvoiceLineItem(
                    description=description,
                    unit_cost=unit_cost(item.task_name),
                    quantity=item.hours,
                )
            )

        if context.billing_method == BillingMethod.FLAT_RATE:
            lines.append(flat_rate_line(context))

        logger.debug(f"Detailed invoice for {context.project_name}: {len(lines)} line(s)")
        return self._payload(context, lines)

    def build(
        self,
        invoice_type: InvoiceType,
        context: InvoiceContext,
        line_items: Sequence[TaskHours],
    ) -> InvoicePayload:
        """Build the payload for the requested invoice layout."""
        if InvoiceType(invoice_type) is InvoiceType.DETAILED:
            return self.build_detailed(context, line_items)
        return self.build_summary(context, line_items)
