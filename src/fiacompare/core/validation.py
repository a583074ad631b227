"""Column contract checks for tables crossing module boundaries."""

from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from .exceptions import MissingColumnsError


def require_columns(
    data: pl.DataFrame | pl.LazyFrame, columns: Iterable[str], table: str
) -> None:
    """
    Raise MissingColumnsError if any of ``columns`` is absent from ``data``.

    Parameters
    ----------
    data : pl.DataFrame or pl.LazyFrame
        Table to check.
    columns : Iterable[str]
        Column names the caller depends on.
    table : str
        Human-readable table name used in the error message.
    """
    if isinstance(data, pl.LazyFrame):
        present = set(data.collect_schema().names())
    else:
        present = set(data.columns)
    missing = [c for c in columns if c not in present]
    if missing:
        raise MissingColumnsError(table, missing)
