"""
Exception types raised by fiacompare.

All errors derive from FIACompareError so callers can abort a comparison
run with a single except clause.
"""

from __future__ import annotations

from collections.abc import Iterable


class FIACompareError(Exception):
    """Base class for all fiacompare errors."""


class MissingColumnsError(FIACompareError):
    """Raised when a fetched table lacks columns the pipeline requires."""

    def __init__(self, table: str, missing: Iterable[str]):
        self.table = table
        self.missing = sorted(missing)
        super().__init__(
            f"{table} table is missing required column(s): "
            f"{', '.join(self.missing)}"
        )


class EmptyRegionError(FIACompareError):
    """Raised when a region name does not resolve to any geometry."""

    def __init__(self, name: str, name_column: str | None = None):
        self.name = name
        self.name_column = name_column
        where = f" in column '{name_column}'" if name_column else ""
        super().__init__(
            f"No region named '{name}' found{where}. "
            "No plots can be scoped without an area of interest."
        )


class MissingCredentialsError(FIACompareError):
    """Raised when remote access is requested without a token."""

    def __init__(self, service: str = "MotherDuck"):
        self.service = service
        super().__init__(
            f"Remote inventory access requires {service} credentials. "
            "Set FIACOMPARE_MOTHERDUCK_TOKEN or run with use_remote=False "
            "to download state databases instead."
        )


class UnknownStateError(FIACompareError):
    """Raised for a state abbreviation with no FIPS code."""

    def __init__(self, state: str):
        self.state = state
        super().__init__(f"Unknown state abbreviation: '{state}'")


class RegionDownloadError(FIACompareError):
    """Raised when a region archive cannot be downloaded or extracted."""


class DuplicatePlotError(FIACompareError):
    """Raised when a plot table holds more than one record per plot_id."""

    def __init__(self, n_duplicates: int, examples: Iterable[object] = ()):
        self.n_duplicates = n_duplicates
        self.examples = list(examples)
        shown = ", ".join(str(e) for e in self.examples)
        super().__init__(
            f"Plot table has {n_duplicates} duplicate plot_id row(s)"
            + (f" (e.g. {shown})" if shown else "")
            + ". Tree records for these plots would be summed more than once; "
            "check that no state was read twice."
        )
