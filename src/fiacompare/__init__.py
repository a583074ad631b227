"""
fiacompare: compare FIA plot metrics obtained through two access paths.
"""

from .core import FIACompareSettings, get_settings
from .core.exceptions import (
    DuplicatePlotError,
    EmptyRegionError,
    FIACompareError,
    MissingColumnsError,
    MissingCredentialsError,
)
from .metrics import (
    aggregate_trees,
    calculate_plot_metrics,
    combine_plot_metrics,
    filter_inventory_year,
    join_plot_years,
    reconcile_sources,
    summarize_by_source,
)
from .pipeline import ComparisonResult, run_comparison

__version__ = "0.1.0"

__all__ = [
    "ComparisonResult",
    "DuplicatePlotError",
    "EmptyRegionError",
    "FIACompareError",
    "FIACompareSettings",
    "MissingColumnsError",
    "MissingCredentialsError",
    "aggregate_trees",
    "calculate_plot_metrics",
    "combine_plot_metrics",
    "filter_inventory_year",
    "get_settings",
    "join_plot_years",
    "reconcile_sources",
    "run_comparison",
    "summarize_by_source",
]
