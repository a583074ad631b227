"""
Per-plot stand metrics from tree-level inventory records.

For each plot the following are derived from the trees measured on it:

    BAPA = Σ TPA_UNADJ × 0.005454 × DIA²        (ft²/acre)
    TPA  = Σ TPA_UNADJ                          (trees/acre)
    QMD  = sqrt(BAPA / TPA / 0.005454)          (inches, 0 when TPA = 0)

Trees with a missing diameter or expansion factor contribute zero to both
sums. Aggregates are then full-outer-joined to the plot table so that every
measured plot is represented, including plots with no tree records, before
the inventory year filter is applied.

Input tables use the canonical column names from ``fiacompare.constants``;
the fetchers are responsible for renaming FIA columns.
"""

from __future__ import annotations

import logging

import polars as pl

from ..constants import (
    BAPA,
    BASAL_AREA_FACTOR,
    DIAMETER,
    INVENTORY_YEAR,
    METRIC_COLUMNS,
    MIN_INVENTORY_YEAR,
    PLOT_COLUMNS,
    PLOT_ID,
    QMD,
    SOURCE,
    TPA,
    TPA_UNADJ,
    TREE_COLUMNS,
)
from ..core.exceptions import DuplicatePlotError
from ..core.validation import require_columns
from .expressions import null_safe_sum, safe_divide, safe_sqrt

logger = logging.getLogger(__name__)

AGGREGATE_COLUMNS = [BAPA, TPA, QMD]


def aggregate_trees(trees: pl.DataFrame) -> pl.DataFrame:
    """
    Sum tree records into basal area, trees per acre and QMD per plot.

    Parameters
    ----------
    trees : pl.DataFrame
        Tree records with plot_id, trees_per_acre_unadjusted and diameter.

    Returns
    -------
    pl.DataFrame
        One row per plot_id with basal_area_per_acre, trees_per_acre and
        quadratic_mean_diameter.

    Raises
    ------
    MissingColumnsError
        If a required tree column is absent.
    """
    require_columns(trees, TREE_COLUMNS, "tree")

    tpa_unadj = pl.col(TPA_UNADJ).cast(pl.Float64)
    dia = pl.col(DIAMETER).cast(pl.Float64)

    return (
        trees.group_by(PLOT_ID)
        .agg(
            [
                null_safe_sum(tpa_unadj * BASAL_AREA_FACTOR * dia.pow(2)).alias(BAPA),
                null_safe_sum(tpa_unadj).alias(TPA),
            ]
        )
        .with_columns(
            safe_sqrt(
                safe_divide(pl.col(BAPA), pl.col(TPA)) / BASAL_AREA_FACTOR
            ).alias(QMD)
        )
    )


def join_plot_years(aggregates: pl.DataFrame, plots: pl.DataFrame) -> pl.DataFrame:
    """
    Full outer join per-plot aggregates to plot records.

    Plots without trees receive zero aggregates. Trees whose plot_id has no
    plot record keep their aggregates with a null inventory_year, which the
    year filter later removes.

    Parameters
    ----------
    aggregates : pl.DataFrame
        Output of aggregate_trees.
    plots : pl.DataFrame
        Plot records with plot_id and inventory_year.

    Returns
    -------
    pl.DataFrame
        One row per plot_id found on either side.

    Raises
    ------
    DuplicatePlotError
        If a plot_id occurs more than once in ``plots``.
    """
    require_columns(aggregates, [PLOT_ID] + AGGREGATE_COLUMNS, "plot aggregate")
    require_columns(plots, PLOT_COLUMNS, "plot")

    plots = plots.select(PLOT_COLUMNS)
    repeated = plots.filter(pl.col(PLOT_ID).is_duplicated())
    if repeated.height:
        # Trees were already summed per plot_id, so the repeat cannot be undone here
        raise DuplicatePlotError(
            plots.height - plots[PLOT_ID].n_unique(),
            repeated[PLOT_ID].unique(maintain_order=True).head(3).to_list(),
        )

    plot_id_dtype = plots.schema[PLOT_ID]
    if aggregates.schema[PLOT_ID] != plot_id_dtype:
        aggregates = aggregates.with_columns(pl.col(PLOT_ID).cast(plot_id_dtype))

    joined = aggregates.join(plots, on=PLOT_ID, how="full", coalesce=True)

    n_tree_only = joined.filter(pl.col(INVENTORY_YEAR).is_null()).height
    if n_tree_only:
        logger.debug(f"{n_tree_only} plot_id(s) have trees but no plot record")

    return joined.with_columns(
        [pl.col(c).fill_null(0.0) for c in AGGREGATE_COLUMNS]
    )


def filter_inventory_year(
    metrics: pl.DataFrame, min_year: int = MIN_INVENTORY_YEAR
) -> pl.DataFrame:
    """Keep rows measured in or after ``min_year``; null years are dropped."""
    require_columns(metrics, [INVENTORY_YEAR], "plot metric")
    return metrics.filter(pl.col(INVENTORY_YEAR) >= min_year)


def calculate_plot_metrics(
    trees: pl.DataFrame,
    plots: pl.DataFrame,
    source: str,
    min_year: int = MIN_INVENTORY_YEAR,
) -> pl.DataFrame:
    """
    Compute per-plot BAPA, TPA and QMD for one inventory source.

    Parameters
    ----------
    trees : pl.DataFrame
        Tree records (plot_id, trees_per_acre_unadjusted, diameter).
    plots : pl.DataFrame
        Plot records (plot_id, inventory_year) from the same source.
    source : str
        Tag stored in the ``source`` column of every output row.
    min_year : int, default 2010
        Earliest inventory year kept.

    Returns
    -------
    pl.DataFrame
        Plot metrics with columns plot_id, basal_area_per_acre,
        trees_per_acre, quadratic_mean_diameter, inventory_year, source.

    Examples
    --------
    >>> trees = pl.DataFrame({
    ...     "plot_id": [1, 1],
    ...     "trees_per_acre_unadjusted": [2.0, 1.0],
    ...     "diameter": [10.0, 5.0],
    ... })
    >>> plots = pl.DataFrame({"plot_id": [1], "inventory_year": [2015]})
    >>> calculate_plot_metrics(trees, plots, "bulk")["trees_per_acre"][0]
    3.0
    """
    require_columns(trees, TREE_COLUMNS, "tree")
    require_columns(plots, PLOT_COLUMNS, "plot")

    joined = join_plot_years(aggregate_trees(trees), plots)
    metrics = filter_inventory_year(joined, min_year)

    logger.info(
        f"{source}: {metrics.height} plot(s) from {min_year} onward "
        f"({joined.height - metrics.height} excluded by year)"
    )

    return metrics.with_columns(pl.lit(source).alias(SOURCE)).select(METRIC_COLUMNS)
