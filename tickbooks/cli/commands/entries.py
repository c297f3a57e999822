"""Show entries command."""

import click

from tickbooks.api import prepare_invoice
from tickbooks.cli.error_handlers import with_error_handling
from tickbooks.cli.runtime import (
    debug_enabled,
    load_session,
    open_store,
    to_date,
    unwrap,
)
from tickbooks.cli.utils.formatters import (
    format_hours,
    format_info,
    format_success,
    format_table,
)
from tickbooks.models.entry import InvoiceDraft

DATE_FORMATS = ["%Y-%m-%d"]


def echo_draft(draft: InvoiceDraft) -> None:
    """Print the entries of a draft and the hours per task."""
    entry_rows = [
        [entry.entry_date, entry.task_name, entry.notes, format_hours(entry.hours)]
        for entry in draft.entries
    ]
    click.echo()
    click.echo(format_table(["Date", "Task", "Notes", "Hours"], entry_rows))

    task_rows = [[item.task_name, format_hours(item.hours)] for item in draft.task_hours]
    click.echo()
    click.echo(format_table(["Task", "Hours"], task_rows))
    click.echo()
    click.echo(
        format_info(f"{len(draft.entries)} entries, {format_hours(draft.total_hours)} total")
    )


@click.command(name="show-entries")
@click.argument("project_id", type=str)
@click.option(
    "--start-date",
    type=click.DateTime(formats=DATE_FORMATS),
    default=None,
    help="Only entries on or after this date (YYYY-MM-DD)",
)
@click.option(
    "--end-date",
    type=click.DateTime(formats=DATE_FORMATS),
    default=None,
    help="Only entries on or before this date (YYYY-MM-DD, default: today)",
)
@click.pass_context
def show_entries(ctx: click.Context, project_id: str, start_date, end_date):
    """Show the unbilled entries of a Tick project.

    Example:
        tickbooks show-entries 1234
        tickbooks show-entries 1234 --start-date 2024-01-01 --end-date 2024-01-31
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
            click.echo(format_info(f"No unbilled entries for project {project_id}."))
            return

        echo_draft(draft)
        click.echo(format_success(f"Project {project_id} is ready to invoice"))
