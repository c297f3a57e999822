"""CLI commands."""

from tickbooks.cli.commands.entries import show_entries
from tickbooks.cli.commands.invoice import create_invoice
from tickbooks.cli.commands.login import check_login
from tickbooks.cli.commands.projects import list_projects
from tickbooks.cli.commands.reconciliation import reconcile

__all__ = ["check_login", "create_invoice", "list_projects", "reconcile", "show_entries"]
