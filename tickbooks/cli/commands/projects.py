"""List projects command."""

import click

from tickbooks.api import list_open_projects
from tickbooks.cli.error_handlers import with_error_handling
from tickbooks.cli.runtime import debug_enabled, load_session, open_store, unwrap
from tickbooks.cli.utils.formatters import (
    format_hours,
    format_info,
    format_success,
    format_table,
)


@click.command(name="list-projects")
@click.pass_context
def list_projects(ctx: click.Context):
    """List Tick projects with unbilled hours.

    Previously generated invoices are reconciled first, so hours of
    invoices deleted in FreshBooks show up again.

    Displays a table with:
    - Client and project name
    - Tick project ID (used by show-entries and create-invoice)
    - Number of open entries and their hours

    Example:
        tickbooks list-projects
    """
    with with_error_handling(debug_enabled(ctx)):
        config, credentials, options = load_session()
        store = open_store(config)

        click.echo(format_info("Fetching open entries from Tick..."))
        projects = unwrap(list_open_projects(credentials, store, options))

        if not projects:
            click.echo()
            click.echo(format_info("No projects with unbilled hours."))
            return

        headers = ["Client", "Project", "Project ID", "Entries", "Hours"]
        rows = [
            [
                project.client_name,
                project.project_name,
                project.project_id,
                project.entry_count,
                format_hours(project.total_hours),
            ]
            for project in projects
        ]

        click.echo()
        click.echo(format_table(headers, rows))
        click.echo()
        click.echo(format_success(f"Found {len(projects)} project(s) with unbilled hours"))
