"""CLI utility functions."""

from tickbooks.cli.utils.formatters import (
    format_error,
    format_hours,
    format_info,
    format_money,
    format_success,
    format_table,
    format_warning,
)

__all__ = [
    "format_error",
    "format_hours",
    "format_info",
    "format_money",
    "format_success",
    "format_table",
    "format_warning",
]
