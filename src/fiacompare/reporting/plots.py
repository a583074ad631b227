"""
Comparison figures for plot metrics from two inventory sources.

All functions take the data they draw as arguments and return a
matplotlib Figure; nothing is shown or saved implicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt
import numpy as np
import polars as pl

from ..constants import BAPA, INVENTORY_YEAR, QMD, SOURCE, TPA
from ..core.validation import require_columns

SOURCE_COLORS = ["#2E7D32", "#1565C0", "#EF6C00", "#6A1B9A"]

METRIC_LABELS = {
    BAPA: "Basal area (ft²/acre)",
    TPA: "Trees per acre",
    QMD: "Quadratic mean diameter (in)",
}


def _clean_axes(ax: plt.Axes) -> None:
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)


def plot_tpa_density(
    comparison: pl.DataFrame,
    bins: int = 40,
    title: str = "Trees per acre by source",
    figsize: tuple = (10, 6),
) -> plt.Figure:
    """
    Overlay the trees-per-acre distribution of each source.

    Parameters
    ----------
    comparison : pl.DataFrame
        Output of reconcile_sources (plot_id, trees_per_acre, source).
    bins : int
        Histogram bins shared across sources.
    title : str
        Chart title.
    figsize : tuple
        Figure size in inches.

    Returns
    -------
    matplotlib.figure.Figure
        The created figure object.
    """
    require_columns(comparison, [TPA, SOURCE], "comparison")

    fig, ax = plt.subplots(figsize=figsize)

    values = comparison[TPA].drop_nulls().to_numpy()
    edges = np.histogram_bin_edges(values, bins=bins) if len(values) else bins

    sources = sorted(comparison[SOURCE].unique().to_list())
    for i, source in enumerate(sources):
        source_values = (
            comparison.filter(pl.col(SOURCE) == source)[TPA].drop_nulls().to_numpy()
        )
        if len(source_values) == 0:
            continue
        ax.hist(
            source_values,
            bins=edges,
            density=True,
            histtype="step",
            linewidth=2,
            color=SOURCE_COLORS[i % len(SOURCE_COLORS)],
            label=f"{source} (n={len(source_values):,})",
        )

    ax.set_xlabel(METRIC_LABELS[TPA])
    ax.set_ylabel("Density")
    if title:
        ax.set_title(title, fontsize=14, fontweight="bold")
    if sources:
        ax.legend(frameon=False)

    _clean_axes(ax)
    plt.tight_layout()

    return fig


def plot_metrics_by_year(
    metrics: pl.DataFrame,
    title: str = "Plot metrics by inventory year",
    figsize: tuple = (15, 5),
) -> plt.Figure:
    """
    Scatter BAPA, TPA and QMD against inventory year, one color per source.

    Parameters
    ----------
    metrics : pl.DataFrame
        Combined plot metrics (see combine_plot_metrics).
    title : str
        Figure title.
    figsize : tuple
        Figure size in inches.

    Returns
    -------
    matplotlib.figure.Figure
        Figure with one panel per metric.
    """
    require_columns(metrics, [BAPA, TPA, QMD, INVENTORY_YEAR, SOURCE], "plot metric")

    fig, axes = plt.subplots(1, 3, figsize=figsize, sharex=True)
    sources = sorted(metrics[SOURCE].unique().to_list())

    for ax, metric in zip(axes, (BAPA, TPA, QMD)):
        for i, source in enumerate(sources):
            subset = metrics.filter(pl.col(SOURCE) == source)
            ax.scatter(
                subset[INVENTORY_YEAR].to_numpy(),
                subset[metric].to_numpy(),
                s=12,
                alpha=0.5,
                color=SOURCE_COLORS[i % len(SOURCE_COLORS)],
                label=source,
            )
        ax.set_xlabel("Inventory year")
        ax.set_ylabel(METRIC_LABELS[metric])
        _clean_axes(ax)

    if sources:
        axes[0].legend(frameon=False)
    if title:
        fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()

    return fig


def save_figures(
    figures: dict[str, plt.Figure],
    output_dir: Union[str, Path],
    dpi: Optional[int] = 150,
) -> list[Path]:
    """Save figures as PNG files named by their keys and close them."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for name, fig in figures.items():
        path = output_dir / f"{name}.png"
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
        plt.close(fig)
        paths.append(path)
    return paths
