"""
Inventory source A: AOI-scoped queries, remote or downloaded.

With ``use_remote=True`` plot and tree records are queried from a
MotherDuck-hosted FIA database, which requires a MotherDuck token. Without
it the same records are read from per-state DuckDB downloads, which is
slower on first use. Either way the result is clipped to the AOI and returned
in the canonical schema.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..constants import PLOT_TABLE, SOURCE_INDEXED, TREE_TABLE
from ..core.exceptions import MissingCredentialsError
from .base import (
    FIAInventoryFetcher,
    Tables,
    merge_tables,
    read_inventory,
    restrict_to_region,
    to_canonical,
)

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from ..core.settings import FIACompareSettings

logger = logging.getLogger(__name__)


def _open_remote(database: str, token: str) -> Any:
    from pyfia import MotherDuckFIA

    return MotherDuckFIA(database, motherduck_token=token)


class IndexedInventoryFetcher(FIAInventoryFetcher):
    """
    Fetch plot and tree records for an AOI.

    Parameters
    ----------
    states : list[str]
        State abbreviations the AOI falls within.
    data_dir : Path
        Directory for downloaded state databases.
    database : str
        MotherDuck database name used in remote mode.
    token : str, optional
        MotherDuck token. Required for remote mode.
    crs : str
        Coordinate reference of AOI polygons.
    open_remote : callable, optional
        Factory ``(database, token) -> db``. Defaults to pyfia.MotherDuckFIA.
    **kwargs
        Passed to FIAInventoryFetcher.
    """

    source = SOURCE_INDEXED

    def __init__(
        self,
        states: list[str],
        data_dir: Path,
        database: str = "fia",
        token: Optional[str] = None,
        crs: str = "EPSG:4326",
        open_remote: Callable[[str, str], Any] | None = None,
        **kwargs,
    ):
        super().__init__(data_dir, crs=crs, **kwargs)
        self.states = list(dict.fromkeys(states))
        self.database = database
        self.token = token
        self._open_remote = open_remote or _open_remote

    @classmethod
    def from_settings(cls, settings: FIACompareSettings) -> "IndexedInventoryFetcher":
        return cls(
            states=settings.states,
            data_dir=settings.fia_dir,
            database=settings.motherduck_database,
            token=settings.motherduck_token,
            crs=settings.crs,
        )

    def fetch(self, aoi: BaseGeometry, use_remote: bool = False) -> Tables:
        """
        Return canonical plot and tree tables inside ``aoi``.

        Raises
        ------
        MissingCredentialsError
            If ``use_remote`` is set and no token is configured.
        """
        if use_remote:
            tables = self._fetch_remote()
        else:
            tables = merge_tables(
                self._read_downloaded_state(state) for state in self.states
            )

        clipped = restrict_to_region(tables, aoi, crs=self.crs)
        logger.info(
            f"{self.source}: {len(clipped[PLOT_TABLE]):,} plots and "
            f"{len(clipped[TREE_TABLE]):,} trees inside AOI"
        )
        return to_canonical(clipped)

    def _fetch_remote(self) -> Tables:
        if not self.token:
            raise MissingCredentialsError("MotherDuck")

        logger.info(f"Querying MotherDuck database '{self.database}'")
        with self._open_remote(self.database, self.token) as db:
            return merge_tables(read_inventory(db, state) for state in self.states)
