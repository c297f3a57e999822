"""Reconcile command."""

import click

from tickbooks.api import reconcile as reconcile_invoices
from tickbooks.cli.error_handlers import with_error_handling
from tickbooks.cli.runtime import debug_enabled, load_session, open_store, unwrap
from tickbooks.cli.utils.formatters import format_info, format_success, format_table
from tickbooks.services.reconciliation import ReconciliationReport


@click.command(name="reconcile")
@click.pass_context
def reconcile(ctx: click.Context):
    """Check generated invoices in FreshBooks and release their entries.

    Entries of deleted invoices are marked unbilled in Tick. Join records of
    invoices that left draft status are removed.

    Example:
        tickbooks reconcile
    """
    with with_error_handling(debug_enabled(ctx)):
        config, credentials, options = load_session()
        store = open_store(config)

        if not len(store):
            click.echo(format_info("No generated invoices to check."))
            return

        report: ReconciliationReport = unwrap(reconcile_invoices(credentials, store, options))

        rows = [
            ["Invoices checked", len(report.invoices_checked)],
            ["Still in draft", len(report.drafts)],
            ["Entries unbilled in Tick", len(report.entries_unbilled)],
            ["Join records released", len(report.records_released)],
        ]
        click.echo(format_table(["", "Count"], rows))
        click.echo()
        click.echo(format_success("Reconciliation complete"))
