"""Table rendering for lsext reports."""

import os
from typing import List, Optional

from rich.cells import cell_len
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .counter import ReportRow

COLUMN_GAP = 2


def display_label(label: str) -> str:
    """Make a label printable, replacing file-name bytes that are not valid UTF-8."""
    try:
        label.encode('utf-8')
    except UnicodeEncodeError:
        return os.fsencode(label).decode('utf-8', 'replace')
    return label


def build_table(rows: List[ReportRow]) -> Table:
    """Build a borderless two-column table: right-aligned counts, left-aligned labels.

    Args:
        rows: Report rows in display order

    Returns:
        A rich Table without header or box
    """
    count_width = max(len(str(row.count)) for row in rows) if rows else 0

    table = Table(show_header=False, box=None, pad_edge=False, padding=(0, COLUMN_GAP // 2))
    table.add_column("count", justify="right", no_wrap=True, min_width=count_width)
    table.add_column("label", justify="left", no_wrap=True, overflow="ignore")

    for row in rows:
        # Text cells keep labels such as "[x]" from being read as markup
        table.add_row(Text(str(row.count)), Text(display_label(row.label)))

    return table


def table_width(rows: List[ReportRow]) -> int:
    """Width needed to print every row without shrinking or cropping a column."""
    count_width = max(len(str(row.count)) for row in rows)
    label_width = max(cell_len(display_label(row.label)) for row in rows)
    return count_width + COLUMN_GAP + label_width


def render_report(rows: List[ReportRow], console: Optional[Console] = None) -> None:
    """Print the report; an empty report prints nothing.

    The table is laid out at its natural width rather than the console width,
    so a long extension never squeezes the count column away.
    """
    if not rows:
        return

    if console is None:
        console = Console(highlight=False)

    # Console.print caps width at the console's own, so lay out on a fixed-width twin
    report_console = Console(
        file=console.file,
        width=table_width(rows),
        height=len(rows),
        highlight=False,
        no_color=console.no_color,
    )
    report_console.print(build_table(rows), crop=False)
