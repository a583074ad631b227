"""
Inventory source B: whole-state downloads clipped afterwards.

``fetch`` returns every plot and tree record for a state. ``clip_to_region``
then reduces those records to the AOI, optionally keeping only the latest
inventory of each plot, and converts them to the canonical schema.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

import polars as pl

from ..constants import PLOT_TABLE, SOURCE_BULK, TREE_TABLE
from .base import FIAInventoryFetcher, Tables, restrict_to_region, to_canonical

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from ..core.settings import FIACompareSettings

logger = logging.getLogger(__name__)


class BulkInventoryFetcher(FIAInventoryFetcher):
    """Fetch whole-state FIA records and clip them to an AOI."""

    source = SOURCE_BULK

    @classmethod
    def from_settings(cls, settings: FIACompareSettings) -> "BulkInventoryFetcher":
        return cls(data_dir=settings.fia_dir, crs=settings.crs)

    def fetch(self, state: str) -> Tables:
        """Return raw FIA plot and tree tables for ``state``."""
        return self._read_downloaded_state(state)

    def clip_to_region(
        self,
        tables: Mapping[str, pl.DataFrame],
        aoi: BaseGeometry,
        most_recent: bool = False,
    ) -> Tables:
        """
        Clip state tables to ``aoi`` and convert to the canonical schema.

        Parameters
        ----------
        tables : Mapping[str, pl.DataFrame]
            Output of ``fetch``.
        aoi : BaseGeometry
            Area of interest in the fetcher's CRS.
        most_recent : bool
            Keep only the latest inventory year of each plot location.
        """
        clipped = restrict_to_region(
            tables, aoi, crs=self.crs, most_recent=most_recent
        )
        logger.info(
            f"{self.source}: {len(clipped[PLOT_TABLE]):,} plots and "
            f"{len(clipped[TREE_TABLE]):,} trees inside AOI"
            + (" (most recent only)" if most_recent else "")
        )
        return to_canonical(clipped)
