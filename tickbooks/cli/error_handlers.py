"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click
from pydantic import ValidationError

from tickbooks.cli.utils.formatters import format_error, format_warning
from tickbooks.services.error_classifier import ErrorClassifier
from tickbooks.services.errors import RemoteError


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Error related to configuration issues."""

    pass


class InputError(CLIError):
    """Error related to command input (unknown project, bad dates, ...)."""

    pass


class ClientMatchError(CLIError):
    """The Tick client or project has no FreshBooks counterpart."""

    pass


class JoinStoreError(CLIError):
    """The local join record file cannot be read or written."""

    pass


def _echo_cli_error(label: str, error: CLIError) -> None:
    click.echo(format_error(f"{label}: {error.message}"))
    if error.recovery_hint:
        click.echo(format_warning(f"Hint: {error.recovery_hint}"))


def handle_remote_error(error: RemoteError) -> int:
    """
    Report a Tick or FreshBooks failure.

    Returns:
        Exit code 5-9 depending on the HTTP status (4 for transport failures)
    """
    description = ErrorClassifier().get_error_description(error)

    if error.is_transport_failure:
        click.echo(format_error("Connection Failed"))
        click.echo(error.message)
        click.echo(
            format_warning("Hint: Check your network connection and the service URLs in .env")
        )
        return 4

    if error.is_auth_error:
        click.echo(format_error("Authentication Failed"))
        click.echo(description)
        if error.service == "freshbooks":
            hint = "Hint: Check FRESHBOOKS_TOKEN in your .env file"
        else:
            hint = "Hint: Check TICK_EMAIL and TICK_PASSWORD in your .env file"
        click.echo(format_warning(hint))
        return 5

    if error.code == 403:
        click.echo(format_error("Permission Denied"))
        click.echo(error.message)
        click.echo(
            format_warning("Hint: Ensure your account may access the requested resources")
        )
        return 6

    if error.is_not_found:
        click.echo(format_error("Resource Not Found"))
        click.echo(error.message)
        click.echo(format_warning("Hint: Verify the service URLs in your configuration"))
        return 7

    if error.code == 429:
        click.echo(format_error("Rate Limit Exceeded"))
        click.echo(format_warning("Hint: Wait a few minutes before retrying"))
        return 8

    click.echo(format_error(f"Remote Error ({description})"))
    click.echo(error.message)
    return 9


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Handle CLI errors with user-friendly messages.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code (1-10 for known error types, 130 or 255 otherwise)
    """
    if isinstance(error, ConfigurationError):
        _echo_cli_error("Configuration Error", error)
        return 1

    elif isinstance(error, ValidationError):
        click.echo(format_error("Configuration Error: invalid settings"))
        for detail in error.errors():
            location = ".".join(str(part) for part in detail.get("loc", ()))
            click.echo(f"  {location}: {detail.get('msg')}")
        click.echo(format_warning("Hint: Set the TICK_* and FRESHBOOKS_* variables in your .env file"))
        return 1

    elif isinstance(error, InputError):
        _echo_cli_error("Input Error", error)
        return 2

    elif isinstance(error, ClientMatchError):
        _echo_cli_error("No Match", error)
        return 3

    elif isinstance(error, JoinStoreError):
        _echo_cli_error("Join Record Error", error)
        return 10

    elif isinstance(error, RemoteError):
        return handle_remote_error(error)

    # Handle click.Abort (user cancellation)
    elif isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130  # Standard exit code for SIGINT

    # Handle generic exceptions
    else:
        click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
        click.echo(str(error))

        if debug:
            click.echo("\nFull stack trace:")
            click.echo(traceback.format_exc())
        else:
            click.echo(format_warning("\nRun with --debug flag for full stack trace"))

        return 255


def with_error_handling(debug: bool = False):
    """
    Context manager adding standardized error handling to CLI commands.

    Args:
        debug: Whether to show full stack traces

    Example:
        @click.command()
        @click.option('--debug', is_flag=True)
        def my_command(debug):
            with with_error_handling(debug):
                # Command implementation
                pass
    """

    class ErrorHandler:
        """Context manager for error handling."""

        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None and not isinstance(exc_val, (SystemExit, click.exceptions.Exit)):
                exit_code = handle_cli_error(exc_val, self.show_debug)
                sys.exit(exit_code)
            return False  # Don't suppress exceptions

    return ErrorHandler(debug)
