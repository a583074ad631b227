"""
Resolve a named region polygon to use as the area of interest (AOI).

Regions come from a zipped shapefile (for example the USFS administrative
forest boundaries). The archive is downloaded once into the data directory
and reused on later runs.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING, Union
from urllib.parse import urlparse

import geopandas as gpd
import requests

from ..core.exceptions import EmptyRegionError, MissingColumnsError, RegionDownloadError

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from ..core.settings import FIACompareSettings

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 1 << 20


def _find_shapefile(directory: Path) -> Path | None:
    shapefiles = sorted(directory.glob("**/*.shp"))
    return shapefiles[0] if shapefiles else None


def download_region_archive(
    url: str, dest_dir: Union[str, Path], timeout: float = 300.0
) -> Path:
    """
    Download and extract a zipped shapefile, returning the .shp path.

    If the archive was already extracted into ``dest_dir`` the existing
    shapefile is returned without touching the network.

    Parameters
    ----------
    url : str
        Location of the zip archive.
    dest_dir : str or Path
        Directory the archive is saved to and extracted under.
    timeout : float
        Request timeout in seconds.

    Returns
    -------
    Path
        Path to the first shapefile found in the archive.

    Raises
    ------
    RegionDownloadError
        If the request fails, the archive is corrupt, or it holds no
        shapefile.
    """
    dest_dir = Path(dest_dir).expanduser()
    archive_name = Path(urlparse(url).path).name or "region.zip"
    extract_dir = dest_dir / Path(archive_name).stem

    existing = _find_shapefile(extract_dir) if extract_dir.exists() else None
    if existing is not None:
        logger.info(f"Using cached region shapefile {existing}")
        return existing

    dest_dir.mkdir(parents=True, exist_ok=True)
    archive_path = dest_dir / archive_name

    logger.info(f"Downloading region archive from {url}")
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with open(archive_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
    except requests.RequestException as e:
        raise RegionDownloadError(f"Failed to download {url}: {e}") from e

    try:
        with zipfile.ZipFile(archive_path) as archive:
            archive.extractall(extract_dir)
    except zipfile.BadZipFile as e:
        raise RegionDownloadError(f"{archive_path} is not a valid zip archive") from e

    shapefile = _find_shapefile(extract_dir)
    if shapefile is None:
        raise RegionDownloadError(f"No shapefile found in {archive_name}")

    logger.debug(f"Extracted {shapefile}")
    return shapefile


def load_region(
    path: Union[str, Path],
    name: str,
    name_column: str,
    crs: str = "EPSG:4326",
) -> BaseGeometry:
    """
    Read a region collection and return the named region as one geometry.

    Parameters
    ----------
    path : str or Path
        Any vector file geopandas can read (shapefile, GeoPackage, GeoJSON).
    name : str
        Value of ``name_column`` identifying the region.
    name_column : str
        Attribute column holding region names.
    crs : str
        Target coordinate reference for the returned geometry.

    Returns
    -------
    BaseGeometry
        Union of all features matching ``name``, in ``crs``.

    Raises
    ------
    MissingColumnsError
        If ``name_column`` is not an attribute of the file.
    EmptyRegionError
        If no feature matches ``name``.
    """
    regions = gpd.read_file(path)

    if name_column not in regions.columns:
        raise MissingColumnsError("region", [name_column])

    selected = regions[regions[name_column] == name]
    if selected.empty:
        raise EmptyRegionError(name, name_column)

    if selected.crs is None:
        logger.warning(f"{path} has no CRS; assuming {crs}")
        selected = selected.set_crs(crs)
    else:
        selected = selected.to_crs(crs)

    geometry = selected.geometry.union_all()
    if geometry.is_empty:
        raise EmptyRegionError(name, name_column)

    logger.info(
        f"Resolved region '{name}' from {len(selected)} feature(s), "
        f"bounds {tuple(round(b, 3) for b in geometry.bounds)}"
    )
    return geometry


def resolve_region(settings: FIACompareSettings) -> BaseGeometry:
    """Download (if needed) and load the AOI described by ``settings``."""
    shapefile = download_region_archive(settings.region_url, settings.region_dir)
    return load_region(
        shapefile,
        name=settings.region_name,
        name_column=settings.region_name_column,
        crs=settings.crs,
    )
