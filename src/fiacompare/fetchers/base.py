"""
Shared FIA table handling for the inventory fetchers.

This module is the boundary between FIA column names and the canonical
schema in ``fiacompare.constants``. Tables leave ``to_canonical`` with
plot_id, inventory_year, trees_per_acre_unadjusted and diameter; nothing
downstream refers to PLT_CN, INVYR, TPA_UNADJ or DIA.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import polars as pl

from ..constants import (
    DIAMETER,
    INVENTORY_YEAR,
    PLOT_COLUMNS,
    PLOT_ID,
    PLOT_TABLE,
    STATE_FIPS,
    TPA_UNADJ,
    TREE_COLUMNS,
    TREE_TABLE,
)
from ..core.exceptions import UnknownStateError
from ..core.validation import require_columns
from ..spatial.clip import clip_plots_to_polygon

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger(__name__)

# Columns requested from the FIA PLOT and TREE tables
FIA_PLOT_COLUMNS = ["CN", "STATECD", "UNITCD", "COUNTYCD", "PLOT", "INVYR", "LAT", "LON"]
FIA_TREE_COLUMNS = ["CN", "PLT_CN", "TPA_UNADJ", "DIA"]

# Columns identifying a physical plot location across remeasurements
PLOT_LOCATION_KEYS = ["STATECD", "UNITCD", "COUNTYCD", "PLOT"]

PLOT_RENAMES = {"CN": PLOT_ID, "INVYR": INVENTORY_YEAR}
TREE_RENAMES = {"PLT_CN": PLOT_ID, "TPA_UNADJ": TPA_UNADJ, "DIA": DIAMETER}

Tables = dict[str, pl.DataFrame]


def state_fips(state: str) -> int:
    """Return the FIPS code for a two-letter state abbreviation."""
    try:
        return STATE_FIPS[state.strip().upper()]
    except KeyError:
        raise UnknownStateError(state) from None


def read_inventory(db: Any, state: str) -> Tables:
    """
    Read plot and tree records for one state from an open FIA database.

    Parameters
    ----------
    db : FIA or MotherDuckFIA
        Connected pyfia database.
    state : str
        Two-letter state abbreviation.

    Returns
    -------
    dict[str, pl.DataFrame]
        Raw FIA tables keyed by ``"plot"`` and ``"tree"``.
    """
    db.clip_by_state(state_fips(state))
    plots = db.get_plots(columns=FIA_PLOT_COLUMNS)
    trees = db.get_trees(columns=FIA_TREE_COLUMNS)

    require_columns(plots, FIA_PLOT_COLUMNS, "FIA PLOT")
    require_columns(trees, ["PLT_CN", "TPA_UNADJ", "DIA"], "FIA TREE")

    logger.info(f"{state}: read {len(plots):,} plots and {len(trees):,} trees")
    return {PLOT_TABLE: plots, TREE_TABLE: trees}


def merge_tables(tables: Iterable[Mapping[str, pl.DataFrame]]) -> Tables:
    """Concatenate same-named tables from several reads."""
    grouped: dict[str, list[pl.DataFrame]] = {}
    for chunk in tables:
        for name, frame in chunk.items():
            grouped.setdefault(name, []).append(frame)
    return {
        name: pl.concat(frames, how="diagonal_relaxed")
        for name, frames in grouped.items()
    }


def keep_most_recent(plots: pl.DataFrame) -> pl.DataFrame:
    """
    Keep one record per plot location: the latest inventory year.

    Records sharing a location and year are tied; the one with the larger
    CN is kept. Plots missing any location key cannot be matched to a
    remeasurement and are kept unchanged.
    """
    require_columns(plots, PLOT_LOCATION_KEYS + ["INVYR", "CN"], "FIA PLOT")

    located = pl.all_horizontal([pl.col(k).is_not_null() for k in PLOT_LOCATION_KEYS])
    latest = (
        plots.filter(located)
        .sort(["INVYR", "CN"], descending=True, nulls_last=True)
        .unique(subset=PLOT_LOCATION_KEYS, keep="first", maintain_order=True)
    )
    unlocated = plots.filter(~located)
    if unlocated.height:
        logger.debug(f"{unlocated.height} plot(s) lack location keys; kept as-is")

    return pl.concat([latest, unlocated], how="vertical")


def restrict_to_region(
    tables: Mapping[str, pl.DataFrame],
    aoi: BaseGeometry,
    crs: str = "EPSG:4326",
    most_recent: bool = False,
) -> Tables:
    """
    Clip raw FIA tables to an AOI.

    Plots are clipped by coordinates; trees are kept only when their
    PLT_CN belongs to a surviving plot.
    """
    plots = clip_plots_to_polygon(tables[PLOT_TABLE], aoi, crs=crs)
    if most_recent:
        plots = keep_most_recent(plots)

    trees = tables[TREE_TABLE]
    plot_cns = plots.select(pl.col("CN").cast(trees.schema["PLT_CN"]).alias("PLT_CN"))
    trees = trees.join(plot_cns, on="PLT_CN", how="semi")

    return {PLOT_TABLE: plots, TREE_TABLE: trees}


def to_canonical(tables: Mapping[str, pl.DataFrame]) -> Tables:
    """Rename FIA columns to the canonical tree and plot schema."""
    plots = tables[PLOT_TABLE]
    trees = tables[TREE_TABLE]
    require_columns(plots, list(PLOT_RENAMES), "FIA PLOT")
    require_columns(trees, list(TREE_RENAMES), "FIA TREE")

    return {
        PLOT_TABLE: plots.rename(PLOT_RENAMES).select(PLOT_COLUMNS),
        TREE_TABLE: trees.rename(TREE_RENAMES).select(TREE_COLUMNS),
    }


def _open_local(db_path: Path) -> Any:
    from pyfia import FIA

    return FIA(db_path)


def _download_state(state: str, data_dir: Path) -> Path:
    from pyfia import download

    return Path(download(state, dir=data_dir))


class FIAInventoryFetcher:
    """
    Base class for fetchers that read FIA data through pyfia.

    Parameters
    ----------
    data_dir : Path
        Directory for downloaded state databases.
    crs : str
        Coordinate reference the AOI polygons are expressed in.
    open_local : callable, optional
        Factory returning a database for a DuckDB path. Defaults to
        ``pyfia.FIA``.
    downloader : callable, optional
        Function ``(state, data_dir) -> Path`` that fetches a state
        database. Defaults to ``pyfia.download``.
    """

    source: str = ""

    def __init__(
        self,
        data_dir: Path,
        crs: str = "EPSG:4326",
        open_local: Callable[[Path], Any] | None = None,
        downloader: Callable[[str, Path], Path] | None = None,
    ):
        self.data_dir = Path(data_dir).expanduser()
        self.crs = crs
        self._open_local = open_local or _open_local
        self._downloader = downloader or _download_state

    def _read_downloaded_state(self, state: str) -> Tables:
        db_path = self._downloader(state, self.data_dir)
        logger.debug(f"Opening {db_path}")
        with self._open_local(db_path) as db:
            return read_inventory(db, state)
