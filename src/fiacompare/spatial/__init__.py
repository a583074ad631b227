"""Area-of-interest loading and spatial clipping."""

from .clip import clip_plots_to_polygon
from .region import download_region_archive, load_region, resolve_region

__all__ = [
    "clip_plots_to_polygon",
    "download_region_archive",
    "load_region",
    "resolve_region",
]
