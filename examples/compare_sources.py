#!/usr/bin/env python3
"""
Comparing Plot Metrics from Two FIA Access Paths
================================================

FIA plot data for the same area can be obtained in different ways, and the
results do not always agree. This script pulls plot and tree records for a
named region through two paths and compares per-plot stand metrics.

Access Paths
------------
- indexed: records scoped to the area of interest, read either from a
  remote MotherDuck database (``--remote``, needs FIACOMPARE_MOTHERDUCK_TOKEN)
  or from downloaded state databases.
- bulk: every record for the state, downloaded and then clipped to the
  area of interest (``--most-recent`` keeps only the latest measurement of
  each plot).

Metrics
-------
For each plot measured in or after 2010:

    BAPA = sum(TPA_UNADJ * 0.005454 * DIA^2)
    TPA  = sum(TPA_UNADJ)
    QMD  = sqrt(BAPA / TPA / 0.005454)

Usage
-----
    # Superior National Forest, Minnesota (defaults)
    uv run python examples/compare_sources.py

    # Another national forest
    uv run python examples/compare_sources.py \\
        --region "Chequamegon-Nicolet National Forest" --state WI

    # Remote queries for the indexed source
    FIACOMPARE_MOTHERDUCK_TOKEN=... uv run python examples/compare_sources.py --remote

Output
------
A per-source summary table, plus two figures written to ``--output-dir``:
tpa_density.png and metrics_by_year.png.
"""

import argparse
from pathlib import Path

from rich.console import Console

from fiacompare import FIACompareError, FIACompareSettings, run_comparison
from fiacompare.core.logging_config import configure_logging
from fiacompare.reporting import (
    display_metrics,
    display_source_summary,
    plot_metrics_by_year,
    plot_tpa_density,
    save_figures,
)

console = Console()


def build_settings(args):
    """Apply command line overrides to environment settings."""
    overrides = {}
    if args.region:
        overrides["region_name"] = args.region
    if args.state:
        overrides["states"] = args.state
    if args.remote:
        overrides["use_remote"] = True
    if args.most_recent:
        overrides["most_recent"] = True
    if args.min_year is not None:
        overrides["min_inventory_year"] = args.min_year
    return FIACompareSettings(**overrides)


def main():
    """Main entry point - parse arguments and run the comparison."""
    parser = argparse.ArgumentParser(
        description="Compare FIA plot metrics between two access paths"
    )
    parser.add_argument("--region", "-r", help="Region name to use as the AOI")
    parser.add_argument(
        "--state", "-s",
        action="append",
        help="State abbreviation covering the AOI (repeatable)",
    )
    parser.add_argument(
        "--remote",
        action="store_true",
        help="Query MotherDuck for the indexed source",
    )
    parser.add_argument(
        "--most-recent",
        action="store_true",
        help="Keep only the latest inventory of each plot in the bulk source",
    )
    parser.add_argument("--min-year", type=int, help="Earliest inventory year")
    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=Path("output"),
        help="Directory for figures",
    )

    args = parser.parse_args()
    settings = build_settings(args)
    configure_logging(settings.log_level)

    console.print(
        f"[cyan]Region: {settings.region_name} "
        f"({', '.join(settings.states)})[/cyan]"
    )

    try:
        result = run_comparison(settings)
    except FIACompareError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    display_source_summary(result.summary(), console=console)
    display_metrics(
        result.combined_metrics.sort("inventory_year", descending=True),
        title="Most recent plot metrics",
        max_rows=10,
        console=console,
    )

    paths = save_figures(
        {
            "tpa_density": plot_tpa_density(result.comparison),
            "metrics_by_year": plot_metrics_by_year(result.combined_metrics),
        },
        args.output_dir,
    )
    for path in paths:
        console.print(f"[green]Saved {path}[/green]")


if __name__ == "__main__":
    main()
