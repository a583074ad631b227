"""Point-in-polygon clipping of FIA plot tables."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import geopandas as gpd
import polars as pl

from ..core.validation import require_columns

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger(__name__)

# FIA plot coordinates are NAD83 geographic
PLOT_CRS = "EPSG:4269"


def clip_plots_to_polygon(
    plots: pl.DataFrame,
    polygon: BaseGeometry,
    crs: str = "EPSG:4326",
    lon_col: str = "LON",
    lat_col: str = "LAT",
) -> pl.DataFrame:
    """
    Keep plots whose coordinates intersect ``polygon``.

    Plots with missing coordinates are dropped.

    Parameters
    ----------
    plots : pl.DataFrame
        Plot table with longitude and latitude columns.
    polygon : BaseGeometry
        Area of interest, expressed in ``crs``.
    crs : str
        Coordinate reference of ``polygon``.
    lon_col, lat_col : str
        Coordinate column names.

    Returns
    -------
    pl.DataFrame
        Subset of ``plots`` with the original column order.
    """
    require_columns(plots, [lon_col, lat_col], "plot")
    if plots.height == 0:
        return plots

    points = gpd.GeoSeries(
        gpd.points_from_xy(
            plots[lon_col].cast(pl.Float64).to_numpy(),
            plots[lat_col].cast(pl.Float64).to_numpy(),
        ),
        crs=PLOT_CRS,
    )
    if points.crs != crs:
        points = points.to_crs(crs)

    inside = points.intersects(polygon).to_numpy()
    clipped = plots.filter(pl.Series(inside))

    logger.debug(f"Clipped {plots.height} plots to {clipped.height} inside AOI")
    return clipped
