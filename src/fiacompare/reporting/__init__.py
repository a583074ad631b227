"""Figures and console tables for comparison results."""

from .console import display_metrics, display_source_summary
from .plots import plot_metrics_by_year, plot_tpa_density, save_figures

__all__ = [
    "display_metrics",
    "display_source_summary",
    "plot_metrics_by_year",
    "plot_tpa_density",
    "save_figures",
]
