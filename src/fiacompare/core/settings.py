"""
Runtime configuration for fiacompare.

Values are read from environment variables prefixed with ``FIACOMPARE_``
and from a ``.env`` file in the working directory.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..constants import MIN_INVENTORY_YEAR

DEFAULT_REGION_URL = (
    "https://data.fs.usda.gov/geodata/edw/edw_resources/shp/"
    "S_USA.AdministrativeForest.zip"
)


class FIACompareSettings(BaseSettings):
    """Settings for a comparison run."""

    model_config = SettingsConfigDict(
        env_prefix="FIACOMPARE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Field(
        default=Path("~/.fiacompare"),
        description="Directory for downloaded region archives and FIA databases",
    )

    # Area of interest
    region_url: str = Field(
        default=DEFAULT_REGION_URL,
        description="URL of a zipped shapefile holding candidate regions",
    )
    region_name: str = Field(
        default="Superior National Forest",
        description="Value of region_name_column selecting the AOI",
    )
    region_name_column: str = Field(
        default="FORESTNAME",
        description="Attribute column holding region names",
    )
    crs: str = Field(
        default="EPSG:4326",
        description="Coordinate reference the AOI is reprojected to",
    )
    states: Annotated[list[str], NoDecode] = Field(
        default=["MN"],
        description="State abbreviations covering the AOI",
    )

    # Inventory access
    use_remote: bool = Field(
        default=False,
        description="Query the remote database instead of downloading states",
    )
    motherduck_database: str = Field(
        default="fia",
        description="MotherDuck database holding FIA tables",
    )
    motherduck_token: Optional[str] = Field(
        default=None,
        description="MotherDuck access token, required when use_remote is set",
    )
    most_recent: bool = Field(
        default=False,
        description="Keep only the latest inventory of each plot when clipping",
    )

    # Metrics
    min_inventory_year: int = Field(
        default=MIN_INVENTORY_YEAR,
        description="Earliest inventory year kept in plot metrics",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("data_dir")
    @classmethod
    def _expand_data_dir(cls, value: Path) -> Path:
        return Path(value).expanduser()

    @field_validator("states", mode="before")
    @classmethod
    def _split_states(cls, value: Any) -> Any:
        # FIACOMPARE_STATES may be "MN,WI" or a JSON list
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [s for s in text.split(",") if s.strip()]
        return value

    @field_validator("states")
    @classmethod
    def _upper_states(cls, value: list[str]) -> list[str]:
        # Each state is read once; order is kept
        return list(dict.fromkeys(s.strip().upper() for s in value))

    @property
    def region_dir(self) -> Path:
        return self.data_dir / "regions"

    @property
    def fia_dir(self) -> Path:
        return self.data_dir / "fia"


@lru_cache
def get_settings() -> FIACompareSettings:
    """Return the process-wide settings instance."""
    return FIACompareSettings()
