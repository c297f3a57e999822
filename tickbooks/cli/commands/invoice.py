"""Create invoice command."""

import click

from tickbooks.api import create_invoice as create_freshbooks_invoice
from tickbooks.api import prepare_invoice
from tickbooks.calculators.invoice_builder import InvoiceType
from tickbooks.cli.commands.entries import DATE_FORMATS, echo_draft
from tickbooks.cli.error_handlers import InputError, with_error_handling
from tickbooks.cli.runtime import (
    debug_enabled,
    load_session,
    open_store,
    to_date,
    unwrap,
)
from tickbooks.cli.utils.formatters import (
    format_info,
    format_money,
    format_success,
    format_warning,
)
from tickbooks.models.entry import InvoiceDraft
from tickbooks.services.invoice_workflow import InvoiceOutcome


@click.command(name="create-invoice")
@click.argument("project_id", type=str)
@click.option(
    "--type",
    "invoice_type",
    type=click.Choice([t.value for t in InvoiceType]),
    default=InvoiceType.SUMMARY.value,
    show_default=True,
    help="Summary (one line) or detailed (one line per task) invoice",
)
@click.option(
    "--start-date",
    type=click.DateTime(formats=DATE_FORMATS),
    default=None,
    help="Only invoice entries on or after this date (YYYY-MM-DD)",
)
@click.option(
    "--end-date",
    type=click.DateTime(formats=DATE_FORMATS),
    default=None,
    help="Only invoice entries on or before this date (YYYY-MM-DD)",
)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def create_invoice(
    ctx: click.Context,
    project_id: str,
    invoice_type: str,
    start_date,
    end_date,
    yes: bool,
):
    """Create a FreshBooks draft invoice from a project's unbilled hours.

    This command:
    1. Reconciles previously generated invoices
    2. Collects the project's unbilled entries
    3. Matches the Tick client and project in FreshBooks
    4. Creates the draft invoice and marks the entries billed in Tick

    Example:
        tickbooks create-invoice 1234
        tickbooks create-invoice 1234 --type detailed --start-date 2024-01-01 -y
    """
    with with_error_handling(debug_enabled(ctx)):
        config, credentials, options = load_session()
        store = open_store(config)

        draft: InvoiceDraft = unwrap(
            prepare_invoice(
                credentials,
                store,
                project_id,
                to_date(start_date),
                to_date(end_date),
                options,
            )
        )
        if not draft.entries:
            raise InputError(
                f"Project {project_id} has no unbilled entries",
                recovery_hint="Run 'tickbooks list-projects' to see projects with open hours",
            )

        first = draft.entries[0]
        echo_draft(draft)

        if not yes:
            click.confirm(
                f"Create a {invoice_type} invoice for {first.client_name} / {first.project_name}?",
                abort=True,
            )

        outcome: InvoiceOutcome = unwrap(
            create_freshbooks_invoice(
                credentials,
                store,
                first.client_name,
                first.project_name,
                draft.entries,
                invoice_type,
                options,
            )
        )

        invoice = outcome.invoice
        click.echo()
        click.echo(
            format_success(
                f"Created draft invoice {invoice.invoice_id} "
                f"({format_money(outcome.payload.total)})"
            )
        )
        if invoice.auth_url:
            click.echo(format_info(f"Open it in FreshBooks: {invoice.auth_url}"))
        if outcome.unbilled_entry_ids:
            ids = ", ".join(str(entry_id) for entry_id in outcome.unbilled_entry_ids)
            click.echo(format_warning(f"Could not mark entries billed in Tick: {ids}"))
