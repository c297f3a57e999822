"""Billing resolution against FreshBooks.

This module matches a Tick client/project pair to the FreshBooks client and
project carrying the same names, and computes the unit cost of invoice
lines from the project's billing method:

- flat-rate: itemised lines cost nothing, the project rate is billed once
- project-rate / staff-rate: every hour costs the project rate
- task-rate: every hour costs the rate of the FreshBooks task (or item)
  named like the Tick task

Names are compared case-insensitively with surrounding whitespace removed.
"""

import logging
from typing import Optional

from tickbooks.models.invoicing import BillingDetails, BillingMethod
from tickbooks.services.errors import RemoteError
from tickbooks.services.freshbooks_client import FreshBooksClient

logger = logging.getLogger(__name__)

# FreshBooks item names are limited to 15 characters
MAX_ITEM_NAME_LENGTH = 15


def names_match(left: str, right: str) -> bool:
    """Compare two names case-insensitively, ignoring surrounding whitespace.

    Example:
        >>> names_match("ACME INC ", "Acme Inc")
        True
    """
    return left.strip().lower() == right.strip().lower()


class BillingResolver:
    """Resolves FreshBooks billing details and unit costs.

    Every lookup walks the relevant FreshBooks listing page by page; nothing
    is cached between calls.
    """

    def __init__(self, freshbooks: FreshBooksClient):
        self.freshbooks = freshbooks

    def resolve_billing(self, client_name: str, project_name: str) -> BillingDetails:
        """Find the FreshBooks client and project for a Tick client/project.

        Args:
            client_name: Tick client name
            project_name: Tick project name

        Returns:
            Billing details of the first client/project pair matching both
            names, or the no-match sentinel

        Raises:
            RemoteError: If a FreshBooks listing fails
        """
        for client in self.freshbooks.iter_clients():
            if not names_match(client.organization, client_name):
                continue

            for project in self.freshbooks.iter_projects(client.client_id):
                if not names_match(project.name, project_name):
                    continue

                method = BillingMethod.from_remote(project.bill_method)
                if method is None:
                    logger.warning(
                        f"Unknown FreshBooks billing method '{project.bill_method}' "
                        f"on project {project.project_id}, billing by task rate"
                    )
                    method = BillingMethod.TASK_RATE

                logger.info(
                    f"Matched '{client_name}'/'{project_name}' to FreshBooks "
                    f"client {client.client_id}, project {project.project_id} ({method.value})"
                )
                return BillingDetails(
                    billing_method=method,
                    billing_rate=project.rate,
                    client_id=client.client_id,
                    project_id=project.project_id,
                )

        logger.info(f"No FreshBooks client/project found for '{client_name}'/'{project_name}'")
        return BillingDetails.no_match()

    def resolve_unit_cost(
        self,
        billing_method: BillingMethod,
        task_name: str,
        project_rate: float,
        project_id: int,
    ) -> float:
        """Compute the hourly unit cost of an invoice line.

        Args:
            billing_method: Billing method of the FreshBooks project
            task_name: Tick task name of the line
            project_rate: FreshBooks project rate
            project_id: FreshBooks project id (0 when unknown)

        Returns:
            Unit cost per hour
        """
        method = BillingMethod(billing_method)

        if method is BillingMethod.FLAT_RATE:
            return 0.0
        if method in (BillingMethod.PROJECT_RATE, BillingMethod.STAFF_RATE):
            return project_rate
        return self.task_rate_lookup(task_name, project_id)

    def task_rate_lookup(self, task_name: str, project_id: Optional[int] = 0) -> float:
        """Look up the hourly rate of a task by name.

        FreshBooks tasks are searched first (only the project's tasks when a
        project id is given). Short names are then searched among items, whose
        names cannot exceed 15 characters. A failing lookup bills 0 rather
        than blocking the invoice.

        Args:
            task_name: Tick task name
            project_id: FreshBooks project id, 0 for all tasks

        Returns:
            The task rate or item unit cost, 0 when nothing matches
        """
        name = task_name.strip()

        try:
            for task in self.freshbooks.iter_tasks(project_id or None):
                if task.name.strip() == name:
                    return task.rate

            if len(name) <= MAX_ITEM_NAME_LENGTH:
                for item in self.freshbooks.iter_items():
                    if item.name.strip() == name:
                        return item.unit_cost
        except RemoteError as e:
            logger.warning(f"Rate lookup for task '{name}' failed, billing 0: {e.message}")
            return 0.0

        logger.debug(f"No FreshBooks task or item named '{name}'")
        return 0.0
