"""Rich console tables for comparison results."""

from __future__ import annotations

from typing import Any, Optional

import polars as pl
from rich.console import Console
from rich.table import Table

from ..constants import INVENTORY_YEAR, PLOT_ID, SOURCE

# Identifiers and years read wrong with thousands separators
UNGROUPED_COLUMNS = {PLOT_ID, INVENTORY_YEAR}


def _cell(value: Any, column: str, precision: int) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:,.{precision}f}"
    if isinstance(value, int) and column not in UNGROUPED_COLUMNS:
        return f"{value:,}"
    return str(value)


def display_metrics(
    df: pl.DataFrame,
    title: str = "",
    max_rows: int = 20,
    precision: int = 2,
    console: Optional[Console] = None,
) -> None:
    """
    Print plot metrics (or any small summary frame) as a Rich table.

    Parameters
    ----------
    df : pl.DataFrame
        Plot metrics, comparison rows or a source summary.
    title : str, optional
        Table title.
    max_rows : int, default 20
        Rows shown before the table is cut off with a caption.
    precision : int, default 2
        Decimal places for BAPA, TPA, QMD and other float columns.
    console : Console, optional
        Console to print to; a new one is created when omitted.
    """
    console = console or Console()

    shown = df.head(max_rows)
    caption = f"showing {max_rows} of {df.height} rows" if df.height > max_rows else None
    table = Table(
        title=title or None,
        title_style="bold blue",
        caption=caption,
        header_style="bold cyan",
    )
    for name, dtype in df.schema.items():
        table.add_column(name, justify="right" if dtype.is_numeric() else "left")

    for row in shown.iter_rows():
        table.add_row(*(_cell(v, c, precision) for v, c in zip(row, df.columns)))

    console.print(table)


def display_source_summary(
    summary: pl.DataFrame, console: Optional[Console] = None
) -> None:
    """Print the per-source summary from summarize_by_source."""
    console = console or Console()
    display_metrics(
        summary,
        title="Trees per acre by inventory source",
        console=console,
    )

    counts = dict(summary.select([SOURCE, "n_plots"]).iter_rows())
    if len(counts) == 2:
        (a, n_a), (b, n_b) = sorted(counts.items())
        if n_a != n_b:
            console.print(
                f"[yellow]Sources disagree on plot count: "
                f"{a}={n_a:,}, {b}={n_b:,}[/yellow]"
            )
