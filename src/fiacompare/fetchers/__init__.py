"""Adapters that fetch FIA plot and tree records into the canonical schema."""

from .base import keep_most_recent, merge_tables, read_inventory, state_fips, to_canonical
from .bulk import BulkInventoryFetcher
from .indexed import IndexedInventoryFetcher

__all__ = [
    "BulkInventoryFetcher",
    "IndexedInventoryFetcher",
    "keep_most_recent",
    "merge_tables",
    "read_inventory",
    "state_fips",
    "to_canonical",
]
