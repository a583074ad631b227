"""Unit tests for the FIA inventory fetchers.

Tests use an in-memory MockFIA in place of pyfia databases. No database
connection or download is performed.
"""

from pathlib import Path

import polars as pl
import pytest

from fiacompare.constants import PLOT_COLUMNS, TREE_COLUMNS
from fiacompare.core.exceptions import (
    MissingColumnsError,
    MissingCredentialsError,
    UnknownStateError,
)
from fiacompare.fetchers import (
    BulkInventoryFetcher,
    IndexedInventoryFetcher,
    keep_most_recent,
    merge_tables,
    read_inventory,
    state_fips,
    to_canonical,
)
from fiacompare.fetchers.base import restrict_to_region


class MockFIA:
    """Stand-in for a pyfia database exposing the calls the fetchers use."""

    def __init__(self, plots, trees):
        self.plots = plots
        self.trees = trees
        self.state_filter = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def clip_by_state(self, fips):
        self.state_filter.append(fips)
        return self

    def get_plots(self, columns=None):
        return self.plots.select(columns) if columns else self.plots

    def get_trees(self, columns=None):
        return self.trees.select(columns) if columns else self.trees


@pytest.fixture
def mock_db(fia_plots, fia_trees):
    return MockFIA(fia_plots, fia_trees)


class TestStateFips:
    """Tests for state abbreviation lookup."""

    def test_known_state(self):
        assert state_fips("MN") == 27
        assert state_fips(" nc ") == 37

    def test_unknown_state(self):
        with pytest.raises(UnknownStateError, match="ZZ"):
            state_fips("ZZ")


class TestReadInventory:
    """Tests for reading raw FIA tables."""

    def test_clips_by_state_fips(self, mock_db):
        read_inventory(mock_db, "MN")
        assert mock_db.state_filter == [27]

    def test_returns_plot_and_tree_tables(self, mock_db, fia_plots, fia_trees):
        tables = read_inventory(mock_db, "MN")
        assert set(tables) == {"plot", "tree"}
        assert tables["plot"].height == fia_plots.height
        assert tables["tree"].height == fia_trees.height

    def test_missing_tree_column_raises(self, fia_plots, fia_trees):
        db = MockFIA(fia_plots, fia_trees)
        db.get_trees = lambda columns=None: fia_trees.drop("DIA")
        with pytest.raises(MissingColumnsError, match="DIA"):
            read_inventory(db, "MN")


class TestTableHelpers:
    """Tests for merging, clipping and renaming FIA tables."""

    def test_merge_tables_concatenates(self, fia_plots, fia_trees):
        merged = merge_tables(
            [
                {"plot": fia_plots, "tree": fia_trees},
                {"plot": fia_plots.head(1), "tree": fia_trees.head(2)},
            ]
        )
        assert merged["plot"].height == fia_plots.height + 1
        assert merged["tree"].height == fia_trees.height + 2

    def test_merge_tables_relaxes_types(self, fia_plots):
        other = fia_plots.with_columns(pl.col("INVYR").cast(pl.Int32))
        merged = merge_tables([{"plot": fia_plots}, {"plot": other}])
        assert merged["plot"].height == 2 * fia_plots.height

    def test_keep_most_recent(self, fia_plots):
        result = keep_most_recent(fia_plots)
        # 101 and 102 share a location; only the 2014 remeasurement survives
        assert sorted(result["CN"].to_list()) == [102, 103, 104]

    def test_keep_most_recent_breaks_year_ties_by_cn(self, fia_plots):
        # A second 2014 record at the 101/102 location
        tied = fia_plots.head(1).with_columns(
            pl.lit(105, dtype=fia_plots.schema["CN"]).alias("CN"),
            pl.lit(2014, dtype=fia_plots.schema["INVYR"]).alias("INVYR"),
        )
        result = keep_most_recent(pl.concat([fia_plots, tied]))

        assert sorted(result["CN"].to_list()) == [103, 104, 105]

    def test_keep_most_recent_keeps_plots_without_location(self, fia_plots):
        unlocated = pl.DataFrame(
            {
                "CN": [201, 202],
                "STATECD": [27, 27],
                "UNITCD": [1, 1],
                "COUNTYCD": [75, 75],
                "PLOT": [None, None],
                "INVYR": [2012, 2018],
                "LAT": [47.3, 47.4],
                "LON": [-91.3, -91.4],
            },
            schema=fia_plots.schema,
        )
        result = keep_most_recent(pl.concat([fia_plots, unlocated]))

        assert sorted(result["CN"].to_list()) == [102, 103, 104, 201, 202]

    def test_restrict_to_region(self, fia_plots, fia_trees, aoi):
        result = restrict_to_region({"plot": fia_plots, "tree": fia_trees}, aoi)

        assert sorted(result["plot"]["CN"].to_list()) == [101, 102, 103]
        assert sorted(result["tree"]["PLT_CN"].to_list()) == [101, 102, 102, 103]

    def test_restrict_to_region_most_recent(self, fia_plots, fia_trees, aoi):
        result = restrict_to_region(
            {"plot": fia_plots, "tree": fia_trees}, aoi, most_recent=True
        )

        assert sorted(result["plot"]["CN"].to_list()) == [102, 103]
        assert 101 not in result["tree"]["PLT_CN"].to_list()

    def test_restrict_to_region_text_identifiers(self, fia_plots, fia_trees, aoi):
        plots = fia_plots.with_columns(pl.col("CN").cast(pl.Utf8))
        trees = fia_trees.with_columns(pl.col("PLT_CN").cast(pl.Utf8))
        result = restrict_to_region({"plot": plots, "tree": trees}, aoi)
        assert result["tree"].height == 4

    def test_to_canonical(self, fia_plots, fia_trees):
        result = to_canonical({"plot": fia_plots, "tree": fia_trees})

        assert result["plot"].columns == PLOT_COLUMNS
        assert result["tree"].columns == TREE_COLUMNS
        assert result["plot"]["plot_id"].to_list() == fia_plots["CN"].to_list()
        assert result["tree"]["diameter"].to_list() == fia_trees["DIA"].to_list()

    def test_to_canonical_missing_column(self, fia_plots, fia_trees):
        with pytest.raises(MissingColumnsError, match="INVYR"):
            to_canonical({"plot": fia_plots.drop("INVYR"), "tree": fia_trees})


class TestIndexedInventoryFetcher:
    """Tests for the AOI-scoped fetcher."""

    def _fetcher(self, mock_db, token=None, states=("MN",)):
        downloads = []

        def downloader(state, data_dir):
            downloads.append(state)
            return data_dir / f"{state.lower()}.duckdb"

        fetcher = IndexedInventoryFetcher(
            states=list(states),
            data_dir=Path("/tmp/fia"),
            token=token,
            open_local=lambda path: mock_db,
            open_remote=lambda database, token: mock_db,
            downloader=downloader,
        )
        return fetcher, downloads

    def test_remote_requires_token(self, mock_db, aoi):
        fetcher, _ = self._fetcher(mock_db)
        with pytest.raises(MissingCredentialsError, match="FIACOMPARE_MOTHERDUCK_TOKEN"):
            fetcher.fetch(aoi, use_remote=True)

    def test_remote_fetch_does_not_download(self, mock_db, aoi):
        fetcher, downloads = self._fetcher(mock_db, token="secret")
        tables = fetcher.fetch(aoi, use_remote=True)

        assert downloads == []
        assert sorted(tables["plot"]["plot_id"].to_list()) == [101, 102, 103]
        assert mock_db.closed

    def test_local_fetch_downloads_each_state(self, mock_db, aoi):
        fetcher, downloads = self._fetcher(mock_db, states=("MN", "WI"))
        tables = fetcher.fetch(aoi, use_remote=False)

        assert downloads == ["MN", "WI"]
        assert mock_db.state_filter == [27, 55]
        # Same mock data read twice
        assert tables["plot"].height == 6

    def test_repeated_state_downloaded_once(self, mock_db, aoi):
        fetcher, downloads = self._fetcher(mock_db, states=("MN", "MN"))
        tables = fetcher.fetch(aoi, use_remote=False)

        assert downloads == ["MN"]
        assert tables["plot"]["plot_id"].is_unique().all()

    def test_returns_canonical_schema(self, mock_db, aoi):
        fetcher, _ = self._fetcher(mock_db)
        tables = fetcher.fetch(aoi)

        assert tables["plot"].columns == PLOT_COLUMNS
        assert tables["tree"].columns == TREE_COLUMNS
        assert 104 not in tables["tree"]["plot_id"].to_list()

    def test_from_settings(self, tmp_path):
        from fiacompare.core.settings import FIACompareSettings

        settings = FIACompareSettings(
            data_dir=tmp_path, states=["mn", "wi"], motherduck_token="t"
        )
        fetcher = IndexedInventoryFetcher.from_settings(settings)

        assert fetcher.states == ["MN", "WI"]
        assert fetcher.token == "t"
        assert fetcher.data_dir == tmp_path / "fia"
        assert fetcher.source == "indexed"


class TestBulkInventoryFetcher:
    """Tests for the whole-state fetcher."""

    @pytest.fixture
    def fetcher(self, mock_db):
        return BulkInventoryFetcher(
            data_dir=Path("/tmp/fia"),
            open_local=lambda path: mock_db,
            downloader=lambda state, data_dir: data_dir / "state.duckdb",
        )

    def test_fetch_returns_all_state_records(self, fetcher, fia_plots):
        tables = fetcher.fetch("MN")
        # Outside-AOI plot 104 is still present before clipping
        assert tables["plot"]["CN"].to_list() == fia_plots["CN"].to_list()

    def test_clip_to_region(self, fetcher, aoi):
        tables = fetcher.clip_to_region(fetcher.fetch("MN"), aoi)

        assert tables["plot"].columns == PLOT_COLUMNS
        assert sorted(tables["plot"]["plot_id"].to_list()) == [101, 102, 103]

    def test_clip_to_region_most_recent(self, fetcher, aoi):
        tables = fetcher.clip_to_region(fetcher.fetch("MN"), aoi, most_recent=True)

        assert sorted(tables["plot"]["plot_id"].to_list()) == [102, 103]
        assert sorted(tables["tree"]["plot_id"].to_list()) == [102, 102, 103]

    def test_source_tag(self, fetcher):
        assert fetcher.source == "bulk"
