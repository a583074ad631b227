"""Per-plot metric calculation and cross-source reconciliation."""

from .plot_metrics import (
    aggregate_trees,
    calculate_plot_metrics,
    filter_inventory_year,
    join_plot_years,
)
from .reconcile import (
    combine_plot_metrics,
    reconcile_sources,
    summarize_by_source,
    to_comparison_rows,
)

__all__ = [
    "aggregate_trees",
    "calculate_plot_metrics",
    "combine_plot_metrics",
    "filter_inventory_year",
    "join_plot_years",
    "reconcile_sources",
    "summarize_by_source",
    "to_comparison_rows",
]
