"""Output formatting utilities for CLI."""

from typing import Any, List, Sequence

import click


def format_success(message: str) -> str:
    """Format a success message in green."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message in red."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message in yellow."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message in blue."""
    return click.style(f"ℹ {message}", fg="blue")


def format_hours(hours: float) -> str:
    """Format hours with two decimals.

    Example:
        >>> format_hours(7.5)
        '7.50 h'
    """
    return f"{hours:.2f} h"


def format_money(amount: float) -> str:
    """Format an invoice amount with thousands separators.

    Example:
        >>> format_money(1234.5)
        '1,234.50'
    """
    return f"{amount:,.2f}"


def format_table(
    headers: Sequence[str], rows: Sequence[Sequence[Any]], max_width: int = 60
) -> str:
    """Format data as a table.

    Args:
        headers: Column headers
        rows: Data rows (each row is a sequence of cell values)
        max_width: Maximum width for each column, longer cells are cut

    Returns:
        Formatted table as a string (empty without headers)
    """
    if not headers:
        return ""

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(col_widths)]):
            col_widths[i] = max(col_widths[i], len(str(cell)))
    col_widths = [min(w, max_width) for w in col_widths]

    def render(cells: Sequence[Any]) -> str:
        formatted: List[str] = []
        for i, width in enumerate(col_widths):
            cell = str(cells[i]) if i < len(cells) else ""
            formatted.append(f" {cell[:width]:<{width}} ")
        return "|" + "|".join(formatted) + "|"

    separator = "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"

    table_lines = [separator, render(headers), separator]
    if rows:
        table_lines.extend(render(row) for row in rows)
        table_lines.append(separator)

    return "\n".join(table_lines)
