"""
Configuration for unit tests.

Unit tests are fast, isolated tests that don't require database connections
or network access. They use mock databases and synthetic data.
"""

from pathlib import Path

import pytest


def pytest_collection_modifyitems(items):
    """Mark tests in this directory as unit tests."""
    unit_dir = Path(__file__).parent
    for item in items:
        if unit_dir in item.path.parents:
            item.add_marker(pytest.mark.unit)
