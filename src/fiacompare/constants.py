"""
Constants and canonical column names for fiacompare.

Every table that crosses a fetcher boundary uses the names defined here.
FIA-native names (PLT_CN, TPA_UNADJ, DIA, CN, INVYR) are only referenced
inside the fetcher adapters.
"""

# Conversion from squared diameter in inches to basal area in square feet:
# pi / (4 * 144)
BASAL_AREA_FACTOR = 0.005454

# Plots measured before this year are excluded from comparisons
MIN_INVENTORY_YEAR = 2010

# Canonical tree columns
PLOT_ID = "plot_id"
TPA_UNADJ = "trees_per_acre_unadjusted"
DIAMETER = "diameter"

# Canonical plot columns
INVENTORY_YEAR = "inventory_year"

# Derived plot metric columns
BAPA = "basal_area_per_acre"
TPA = "trees_per_acre"
QMD = "quadratic_mean_diameter"
SOURCE = "source"

TREE_COLUMNS = [PLOT_ID, TPA_UNADJ, DIAMETER]
PLOT_COLUMNS = [PLOT_ID, INVENTORY_YEAR]
METRIC_COLUMNS = [PLOT_ID, BAPA, TPA, QMD, INVENTORY_YEAR, SOURCE]
COMPARISON_COLUMNS = [PLOT_ID, TPA, SOURCE]

# Source tags
SOURCE_INDEXED = "indexed"
SOURCE_BULK = "bulk"

# Table keys returned by fetchers
TREE_TABLE = "tree"
PLOT_TABLE = "plot"

# State abbreviation to FIPS code
STATE_FIPS = {
    "AL": 1, "AK": 2, "AZ": 4, "AR": 5, "CA": 6, "CO": 8, "CT": 9,
    "DE": 10, "DC": 11, "FL": 12, "GA": 13, "HI": 15, "ID": 16, "IL": 17,
    "IN": 18, "IA": 19, "KS": 20, "KY": 21, "LA": 22, "ME": 23, "MD": 24,
    "MA": 25, "MI": 26, "MN": 27, "MS": 28, "MO": 29, "MT": 30, "NE": 31,
    "NV": 32, "NH": 33, "NJ": 34, "NM": 35, "NY": 36, "NC": 37, "ND": 38,
    "OH": 39, "OK": 40, "OR": 41, "PA": 42, "RI": 44, "SC": 45, "SD": 46,
    "TN": 47, "TX": 48, "UT": 49, "VT": 50, "VA": 51, "WA": 53, "WV": 54,
    "WI": 55, "WY": 56, "PR": 72,
}
