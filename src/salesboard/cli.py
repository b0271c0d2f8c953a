# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SalesBoard.

This module wires together the building blocks of SalesBoard:

- application configuration (default filters, aggregation and display),
- records import from a CSV export,
- the series pipeline (filter, aggregate, sort, cumulate, format),
- tabular rendering and CSV export.

The CLI is intentionally thin: it does not implement any dashboard logic
itself, it builds a FilterSelection from arguments and configuration and
calls ``pipeline.compute_series()``.


High-level pipeline
-------------------

1) Load the TOML configuration (``salesboard_config.toml`` by default,
   optional) using ``load_app_config()``.

2) Resolve the records CSV (``--records`` overrides ``[data].records_file``)
   and read it with ``io.read_records()``.

3) Build the filter selection. Command-line options override the
   ``[filters]`` defaults of the configuration:

   - ``--range all|current-month|last-n-months``
   - ``--lookback 3|6|12`` for last-n-months
   - ``--from YYYY-MM`` / ``--to YYYY-MM`` for a custom range
   - ``--month YYYY-MM`` for one specific month
   - ``--business-unit`` and ``--year``

4) Compute the series and render it as a console table and/or CSV file,
   followed by a one-line summary.


Examples
--------

    salesboard --records data/targets.csv
    salesboard --records data/targets.csv --range last-n-months --lookback 3
    salesboard --records data/targets.csv --from 2024-01 --to 2024-06 \
        --mode per_business_unit --cumulative --format idr
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from . import __version__
from .aggregation import AggregationMode
from .config import (
    DEFAULT_CONFIG_FILE,
    AggregationOptions,
    AppConfig,
    DisplayOptions,
    FilterDefaults,
    load_app_config,
)
from .cumulative import CumulativeScope
from .filters import ALL, LOOKBACK_CHOICES, DateRange, FilterSelection
from .formatting import FORMATTERS, format_percentage, get_formatter
from .io import read_records
from .periods import parse_period
from .pipeline import achievement_band, compute_series, summarize_series
from .series import ChartSeries

TABLE_COLUMNS: list[str] = [
    "period",
    "business_unit_id",
    "target_display",
    "actual_display",
    "difference_display",
    "percentage",
]

CUMULATIVE_TABLE_COLUMNS: list[str] = [
    "cumulative_target_display",
    "cumulative_actual_display",
    "cumulative_percentage",
]


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="salesboard",
        description=(
            "SalesBoard - Sales operations dashboard analytics. "
            "Reads target/actual records, filters them by business unit and "
            "period, aggregates them per month and renders the chart series."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of salesboard and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when "
            "it exists."
        ),
    )
    ap.add_argument(
        "--records",
        dest="records_path",
        metavar="CSV_PATH",
        help="Records CSV file. Overrides [data].records_file from config.",
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log pipeline steps to stderr.",
    )

    # Filters
    ap.add_argument(
        "--range",
        dest="date_range",
        choices=[DateRange.ALL.value, DateRange.CURRENT_MONTH.value, DateRange.LAST_N_MONTHS.value],
        help="Relative date range. Ignored when --from/--to or --month is given.",
    )
    ap.add_argument(
        "--lookback",
        type=int,
        choices=list(LOOKBACK_CHOICES),
        help="Number of months for --range last-n-months.",
    )
    ap.add_argument(
        "--from",
        dest="from_period",
        metavar="YYYY-MM",
        help="Custom range start month (inclusive).",
    )
    ap.add_argument(
        "--to",
        dest="to_period",
        metavar="YYYY-MM",
        help="Custom range end month (inclusive).",
    )
    ap.add_argument(
        "--month",
        dest="specific_month",
        metavar="YYYY-MM",
        help="Show one specific month only.",
    )
    ap.add_argument(
        "--business-unit",
        dest="business_unit",
        help='Business unit identifier, or "all".',
    )
    ap.add_argument(
        "--year",
        help='Calendar year, or "all".',
    )

    # Aggregation
    ap.add_argument(
        "--mode",
        choices=[m.value for m in AggregationMode],
        help="Per business unit rows or all units summed per period.",
    )
    ap.add_argument(
        "--cumulative",
        action="store_true",
        default=None,
        help="Add running totals of target and actual.",
    )
    ap.add_argument(
        "--scope",
        choices=[s.value for s in CumulativeScope],
        help="Where running totals restart: each year or never.",
    )

    # Display options
    ap.add_argument(
        "--format",
        dest="number_format",
        choices=sorted(FORMATTERS),
        help="Number format for amounts.",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes a CSV file only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory where CSV files will be written when display "
            "mode includes 'csv'. If omitted, 'data/output' is used."
        ),
    )

    return ap


def _default_config() -> AppConfig:
    return AppConfig(
        records_file=None,
        filters=FilterDefaults(),
        aggregation=AggregationOptions(),
        display=DisplayOptions(),
    )


def _resolve_config(config_path: Optional[str]) -> AppConfig:
    if config_path:
        return load_app_config(config_path)
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return load_app_config()
    return _default_config()


def _parse_year_arg(value: str) -> Union[str, int]:
    if value.strip().lower() == ALL:
        return ALL
    return int(value)


def build_selection(args: argparse.Namespace, defaults: FilterDefaults) -> FilterSelection:
    """
    Build the FilterSelection from CLI arguments over config defaults.

    Raises:
        ValueError: for malformed YYYY-MM values or years.
    """
    common = {
        "business_unit_id": (
            args.business_unit if args.business_unit is not None else defaults.business_unit_id
        ),
        "year": _parse_year_arg(args.year) if args.year is not None else defaults.year,
    }

    if args.specific_month:
        period = parse_period(args.specific_month)
        return FilterSelection.specific(period.year, period.month, **common)

    if args.from_period or args.to_period:
        start = parse_period(args.from_period) if args.from_period else None
        end = parse_period(args.to_period) if args.to_period else None
        return FilterSelection.custom_range(start, end, **common)

    return FilterSelection(
        date_range=DateRange(args.date_range) if args.date_range else defaults.date_range,
        lookback_months=args.lookback or defaults.lookback_months,
        **common,
    )


def _table_view(series: ChartSeries, cumulative: bool, decimals: int) -> pd.DataFrame:
    columns = TABLE_COLUMNS + (CUMULATIVE_TABLE_COLUMNS if cumulative else [])
    view = series.data[[c for c in columns if c in series.data.columns]].copy()
    view["percentage"] = view["percentage"].map(lambda v: format_percentage(v, decimals))
    if "cumulative_percentage" in view.columns:
        view["cumulative_percentage"] = view["cumulative_percentage"].map(format_percentage)
    return view


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the SalesBoard CLI.

    This function parses command-line arguments, loads the optional
    configuration, reads the records CSV, builds the filter selection,
    computes the series and renders it as a console table and/or a CSV
    file.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"salesboard version {__version__}")
        return

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    # 1) Load configuration (defaults when no config file exists).
    try:
        config = _resolve_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    # 2) Resolve and read the records CSV.
    records_path = Path(args.records_path) if args.records_path else config.records_file
    if records_path is None:
        parser.error("No records file given. Use --records or set [data].records_file.")
    if not records_path.is_file():
        parser.error(f"Records file not found: {records_path}")

    try:
        records = read_records(records_path)
        selection = build_selection(args, config.filters)
    except ValueError as exc:
        parser.error(str(exc))

    print(f"Records read from {records_path}: {len(records)}")

    # 3) Aggregation and display options: config overridden by CLI.
    mode = AggregationMode(args.mode) if args.mode else config.aggregation.mode
    cumulative = config.aggregation.cumulative if args.cumulative is None else args.cumulative
    scope = CumulativeScope(args.scope) if args.scope else config.aggregation.cumulative_scope
    formatter = get_formatter(args.number_format or config.display.number_format)
    display_mode = args.display_mode or config.display.mode

    try:
        series = compute_series(
            records,
            selection=selection,
            mode=mode,
            cumulative=cumulative,
            scope=scope,
            formatter=formatter,
            decimals=config.display.percentage_decimals,
        )
    except ValueError as exc:
        parser.error(str(exc))

    print(f"Applied selection: {series.meta['selection']}")

    if not series.has_data:
        print(series.message)
        return

    summary = summarize_series(series)

    # 4) Render to console (table mode).
    if display_mode in {"table", "both"}:
        print()
        print(f"=== Target vs actual ({mode.value}) ===")
        print(
            _table_view(series, cumulative, config.display.percentage_decimals).to_string(
                index=False
            )
        )
        print()
        print(
            f"{summary.first_period} → {summary.last_period} | "
            f"latest: {format_percentage(summary.latest_achievement)} "
            f"({achievement_band(summary.latest_achievement)}) | "
            f"average: {format_percentage(summary.average_achievement, 2)} | "
            f"trend: {summary.trend}"
        )

    # 5) Render to CSV files (csv mode).
    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        path = output_dir / f"series_{timestamp}.csv"
        series.data.to_csv(path, index=False)
        print(f"Wrote {path} ({len(series.data)} rows)")


if __name__ == "__main__":
    main()
