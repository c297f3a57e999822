"""Tickbooks CLI.

This module provides the command-line interface for creating FreshBooks
invoices from unbilled Tick hours.
"""

import click

from tickbooks.cli.commands import (
    check_login,
    create_invoice,
    list_projects,
    reconcile,
    show_entries,
)
from tickbooks.config.logging_config import LoggingConfig, configure_logging
from tickbooks.utils.logging_utils import LogContext, generate_correlation_id

__version__ = "1.0.0"


@click.group(help="Tickbooks - Create FreshBooks invoices from unbilled Tick hours")
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Verbose logging and full stack traces")
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """Tickbooks CLI main entry point."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    logging_config = LoggingConfig.from_env()
    if debug:
        logging_config.log_level = "DEBUG"
    configure_logging(logging_config)

    # One correlation id per invocation ties the log records of a run together
    ctx.with_resource(LogContext(correlation_id=generate_correlation_id()))


# Register commands
cli.add_command(check_login)
cli.add_command(list_projects)
cli.add_command(show_entries)
cli.add_command(create_invoice)
cli.add_command(reconcile)


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
