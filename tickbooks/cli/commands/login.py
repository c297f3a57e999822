"""Check login command."""

import click

from tickbooks.api import check_login as check_tick_login
from tickbooks.cli.error_handlers import ConfigurationError, with_error_handling
from tickbooks.cli.runtime import debug_enabled, load_session, unwrap
from tickbooks.cli.utils.formatters import format_info, format_success


@click.command(name="check-login")
@click.pass_context
def check_login(ctx: click.Context):
    """Check the Tick account settings.

    Example:
        tickbooks check-login
    """
    with with_error_handling(debug_enabled(ctx)):
        config, credentials, options = load_session()
        click.echo(format_info(f"Logging in to {config.tick_url}..."))

        if not unwrap(check_tick_login(credentials, options)):
            raise ConfigurationError(
                "Tick did not accept the login",
                recovery_hint="Check TICK_URL, TICK_EMAIL and TICK_PASSWORD in your .env file",
            )

        click.echo(format_success(f"Logged in to Tick as {config.tick_email}"))
