"""
Shared fixtures for fiacompare tests.

Provides small canonical tree/plot tables with hand-checkable metrics and
synthetic FIA tables positioned around a test AOI.
"""

import matplotlib

matplotlib.use("Agg")

import polars as pl
import pytest
from shapely.geometry import box


@pytest.fixture
def worked_example_trees():
    """
    Two trees on plot 1.

    BAPA = 2.0 * 0.005454 * 10² + 1.0 * 0.005454 * 5²
         = 1.0908 + 0.13635 = 1.22715
    TPA  = 3.0
    QMD  = sqrt(1.22715 / 3.0 / 0.005454) ≈ 8.660
    """
    return pl.DataFrame(
        {
            "plot_id": [1, 1],
            "trees_per_acre_unadjusted": [2.0, 1.0],
            "diameter": [10.0, 5.0],
        }
    )


@pytest.fixture
def worked_example_plots():
    return pl.DataFrame({"plot_id": [1], "inventory_year": [2015]})


@pytest.fixture
def mixed_trees():
    """Trees covering every join and null-handling case.

    - plot 1: normal trees, year 2015
    - plot 2: one tree missing DIA, one missing TPA_UNADJ, year 2011
    - plot 3: no trees, year 2012
    - plot 4: trees but measured in 2005
    - plot 5: trees with no plot record
    """
    return pl.DataFrame(
        {
            "plot_id": [1, 1, 2, 2, 4, 5],
            "trees_per_acre_unadjusted": [2.0, 1.0, 6.018046, None, 6.018046, 3.0],
            "diameter": [10.0, 5.0, None, 8.0, 12.0, 7.0],
        }
    )


@pytest.fixture
def mixed_plots():
    return pl.DataFrame(
        {
            "plot_id": [1, 2, 3, 4],
            "inventory_year": [2015, 2011, 2012, 2005],
        }
    )


@pytest.fixture
def aoi():
    """Unit square in lon/lat used as the area of interest."""
    return box(-92.0, 47.0, -91.0, 48.0)


@pytest.fixture
def fia_plots():
    """Raw FIA PLOT rows: two inside the AOI (one remeasured), one outside."""
    return pl.DataFrame(
        {
            "CN": [101, 102, 103, 104],
            "STATECD": [27, 27, 27, 27],
            "UNITCD": [1, 1, 1, 1],
            "COUNTYCD": [75, 75, 75, 31],
            "PLOT": [10, 10, 11, 12],
            "INVYR": [2009, 2014, 2016, 2017],
            "LAT": [47.5, 47.5, 47.2, 45.0],
            "LON": [-91.5, -91.5, -91.8, -95.0],
        }
    )


@pytest.fixture
def fia_trees():
    return pl.DataFrame(
        {
            "CN": [1, 2, 3, 4, 5],
            "PLT_CN": [101, 102, 102, 103, 104],
            "TPA_UNADJ": [6.018046, 6.018046, 6.018046, 74.965282, 6.018046],
            "DIA": [8.0, 9.1, 12.4, 1.5, 20.0],
        }
    )
