"""
Shared formatting utilities for consistent console output.

This module provides the fixed-width table renderer used by the audit reports.
"""

from typing import Optional, Sequence

DEFAULT_MAX_COLUMN_WIDTH = 48
ELLIPSIS = "..."
EMPTY_CELL = "-"


def truncate(value: str, max_width: int = DEFAULT_MAX_COLUMN_WIDTH) -> str:
    """
    Shorten a cell so that it fits within max_width characters.

    Examples:
        >>> truncate("abcdef", 5)
        'ab...'
        >>> truncate("abc", 5)
        'abc'
    """
    if len(value) <= max_width:
        return value
    if max_width <= len(ELLIPSIS):
        return value[:max_width]
    return value[: max_width - len(ELLIPSIS)] + ELLIPSIS


def format_cell(value) -> str:
    """Render a single table cell; None and empty strings become a dash."""
    if value is None:
        return EMPTY_CELL
    text = str(value)
    return text if text else EMPTY_CELL


def format_table(
    headers: Sequence[str],
    rows: Sequence[Sequence],
    max_column_width: int = DEFAULT_MAX_COLUMN_WIDTH,
) -> str:
    """
    Format rows as a left-aligned, fixed-width text table.

    Args:
        headers: Column titles
        rows: Row values, one sequence per row, in header order
        max_column_width: Cells longer than this are truncated

    Returns:
        The table as a single string (header, separator, rows)
    """
    rendered = [[truncate(format_cell(cell), max_column_width) for cell in row] for row in rows]
    widths = [len(header) for header in headers]
    for row in rendered:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))

    def _line(cells):
        return "  ".join(cell.ljust(widths[index]) for index, cell in enumerate(cells)).rstrip()

    lines = [_line(list(headers)), "  ".join("-" * width for width in widths)]
    lines.extend(_line(row) for row in rendered)
    return "\n".join(lines)


def format_date(value: Optional[str]) -> str:
    """
    Reduce an ISO-8601 timestamp to its date part.

    Examples:
        >>> format_date("2026-03-01T00:00:00Z")
        '2026-03-01'
        >>> format_date(None)
        '-'
    """
    if not value:
        return EMPTY_CELL
    return value.split("T", 1)[0]


def format_quantity(value) -> str:
    """Render a reservation quantity without a trailing .0 for whole numbers."""
    if value is None:
        return EMPTY_CELL
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
