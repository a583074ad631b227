"""
Configuration for integration tests.

Integration tests download real FIA and boundary data, so they are slow
and need network access. They are skipped unless selected with
``-m "db"``.
"""

from pathlib import Path

import pytest


def pytest_collection_modifyitems(items):
    """Mark tests in this directory as integration tests."""
    integration_dir = Path(__file__).parent
    for item in items:
        if integration_dir in item.path.parents:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.db)
            item.add_marker(pytest.mark.slow)
