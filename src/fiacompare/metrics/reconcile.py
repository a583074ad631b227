"""
Combine plot metrics from two inventory sources for comparison.

Sources do not agree on identifier types (DuckDB tables may expose plot CNs
as integers, remote tables as text), so every plot_id is rendered as a
string before tables are stacked.
"""

from __future__ import annotations

from typing import Optional

import polars as pl

from ..constants import (
    COMPARISON_COLUMNS,
    INVENTORY_YEAR,
    METRIC_COLUMNS,
    PLOT_ID,
    SOURCE,
    TPA,
)
from ..core.validation import require_columns


def _plot_id_as_text(data: pl.DataFrame) -> pl.Expr:
    expr = pl.col(PLOT_ID)
    if data.schema[PLOT_ID].is_float():
        ids = data[PLOT_ID].drop_nulls()
        # Whole-number floats would otherwise render as "123.0"; anything
        # fractional keeps its float text so distinct ids stay distinct
        if ids.is_finite().all() and (ids == ids.floor()).all():
            expr = expr.cast(pl.Int64)
    return expr.cast(pl.Utf8).alias(PLOT_ID)


def to_comparison_rows(
    metrics: pl.DataFrame, source: Optional[str] = None
) -> pl.DataFrame:
    """
    Project plot metrics to (plot_id, trees_per_acre, source).

    Parameters
    ----------
    metrics : pl.DataFrame
        Plot metrics from calculate_plot_metrics.
    source : str, optional
        Tag to assign. Defaults to the existing ``source`` column.
    """
    required = [PLOT_ID, TPA] if source is not None else [PLOT_ID, TPA, SOURCE]
    require_columns(metrics, required, "plot metric")

    source_expr = pl.lit(source) if source is not None else pl.col(SOURCE)
    return metrics.select(
        [
            _plot_id_as_text(metrics),
            pl.col(TPA).cast(pl.Float64),
            source_expr.cast(pl.Utf8).alias(SOURCE),
        ]
    ).select(COMPARISON_COLUMNS)


def reconcile_sources(
    first: pl.DataFrame,
    first_source: str,
    second: pl.DataFrame,
    second_source: str,
) -> pl.DataFrame:
    """
    Stack two sources' plot metrics into one comparison table.

    The row count of the result is always ``first.height + second.height``;
    plots present in both sources appear once per source.

    Parameters
    ----------
    first, second : pl.DataFrame
        Plot metrics for each source.
    first_source, second_source : str
        Source tags written to the ``source`` column.

    Returns
    -------
    pl.DataFrame
        Columns plot_id (Utf8), trees_per_acre, source.
    """
    return pl.concat(
        [
            to_comparison_rows(first, first_source),
            to_comparison_rows(second, second_source),
        ],
        how="vertical",
    )


def combine_plot_metrics(first: pl.DataFrame, second: pl.DataFrame) -> pl.DataFrame:
    """Stack full plot metric tables with a common plot_id representation."""
    frames = []
    for metrics in (first, second):
        require_columns(metrics, METRIC_COLUMNS, "plot metric")
        frames.append(
            metrics.with_columns(
                [
                    _plot_id_as_text(metrics),
                    pl.col(SOURCE).cast(pl.Utf8),
                    pl.col(INVENTORY_YEAR).cast(pl.Int64),
                ]
            ).select(METRIC_COLUMNS)
        )
    return pl.concat(frames, how="vertical_relaxed")


def summarize_by_source(comparison: pl.DataFrame) -> pl.DataFrame:
    """
    Per-source plot count and trees-per-acre distribution summary.

    Returns
    -------
    pl.DataFrame
        Columns source, n_plots, tpa_mean, tpa_median, tpa_max, sorted by
        source.
    """
    require_columns(comparison, COMPARISON_COLUMNS, "comparison")
    return (
        comparison.group_by(SOURCE)
        .agg(
            [
                pl.len().alias("n_plots"),
                pl.col(TPA).mean().alias("tpa_mean"),
                pl.col(TPA).median().alias("tpa_median"),
                pl.col(TPA).max().alias("tpa_max"),
            ]
        )
        .sort(SOURCE)
    )
