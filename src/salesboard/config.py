# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SalesBoard.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating the default filter, aggregation and display options,
- exposing typed dataclasses used by the CLI.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from .aggregation import AggregationMode
from .cumulative import CumulativeScope
from .filters import ALL, LOOKBACK_CHOICES, DateRange
from .formatting import get_formatter

DEFAULT_CONFIG_FILE = "salesboard_config.toml"
DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")


@dataclass(frozen=True)
class FilterDefaults:
    """Initial state of the filter controls."""

    business_unit_id: Any = ALL
    year: Union[str, int] = ALL
    date_range: DateRange = DateRange.ALL
    lookback_months: int = 6


@dataclass(frozen=True)
class AggregationOptions:
    mode: AggregationMode = AggregationMode.ALL_UNITS_SUMMED
    cumulative: bool = False
    cumulative_scope: CumulativeScope = CumulativeScope.YEAR


@dataclass(frozen=True)
class DisplayOptions:
    """
    Display options for tables and exports.

    ``number_format`` is the name of a registered NumberFormatter,
    ``mode`` one of "table", "csv" or "both".
    """

    number_format: str = "compact"
    mode: str = "table"
    percentage_decimals: int = 2


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SalesBoard.

    This aggregates:
    - where the records CSV lives (optional, may be given on the CLI),
    - the default filter selection,
    - the aggregation options,
    - display options for tables and CSV exports.
    """

    records_file: Optional[Path]
    filters: FilterDefaults
    aggregation: AggregationOptions
    display: DisplayOptions


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_year(value: Any) -> Union[str, int]:
    if value is None or str(value).strip().lower() == ALL:
        return ALL
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for 'filters.year': {value!r}. "
            "Expected a year or \"all\"."
        ) from exc


def _parse_filters(section: Mapping[str, Any]) -> FilterDefaults:
    try:
        date_range = DateRange(str(section.get("date_range", DateRange.ALL.value)))
    except ValueError as exc:
        raise ValueError(
            f"Invalid value for 'filters.date_range': {section.get('date_range')!r}. "
            f"Expected one of: {', '.join(d.value for d in DateRange)}."
        ) from exc

    try:
        lookback = int(section.get("lookback_months", 6))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'filters.lookback_months'. Expected an integer."
        ) from exc
    if lookback not in LOOKBACK_CHOICES:
        raise ValueError(
            f"Invalid value for 'filters.lookback_months': {lookback}. "
            f"Expected one of: {', '.join(str(n) for n in LOOKBACK_CHOICES)}."
        )

    return FilterDefaults(
        business_unit_id=section.get("business_unit", ALL),
        year=_parse_year(section.get("year", ALL)),
        date_range=date_range,
        lookback_months=lookback,
    )


def _parse_aggregation(section: Mapping[str, Any]) -> AggregationOptions:
    try:
        mode = AggregationMode(
            str(section.get("mode", AggregationMode.ALL_UNITS_SUMMED.value))
        )
        scope = CumulativeScope(
            str(section.get("cumulative_scope", CumulativeScope.YEAR.value))
        )
    except ValueError as exc:
        raise ValueError(f"Invalid [aggregation] option: {exc}") from exc

    return AggregationOptions(
        mode=mode,
        cumulative=bool(section.get("cumulative", False)),
        cumulative_scope=scope,
    )


def _parse_display(section: Mapping[str, Any]) -> DisplayOptions:
    number_format = str(section.get("number_format", "compact")).strip().lower()
    # Raises ValueError for unknown formats.
    get_formatter(number_format)

    mode = str(section.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid value for 'display.mode': {mode!r}. "
            f"Expected one of: {', '.join(DISPLAY_MODES)}."
        )

    try:
        percentage_decimals = int(section.get("percentage_decimals", 2))
    except (TypeError, ValueError):
        percentage_decimals = 2

    return DisplayOptions(
        number_format=number_format,
        mode=mode,
        percentage_decimals=percentage_decimals,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the SalesBoard application configuration from a TOML file.

    Expected sections in the TOML file (all optional)
    -------------------------------------------------
    [data]
        ``records_file``: CSV export of the records, resolved relative to
        the directory of the TOML file.

    [filters]
        ``business_unit``, ``year``, ``date_range`` and ``lookback_months``:
        initial filter selection.

    [aggregation]
        ``mode`` ("all_units_summed" or "per_business_unit"),
        ``cumulative`` (bool) and ``cumulative_scope`` ("year" or
        "all_years").

    [display]
        ``number_format`` ("compact", "idr", "idr_short"), ``mode``
        ("table", "csv", "both") and ``percentage_decimals``.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. Defaults to
        ``salesboard_config.toml`` in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    ValueError
        If the file cannot be parsed or holds invalid option values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Data section
    records_raw = _section(raw, "data").get("records_file")
    records_file = (base_dir / str(records_raw)).resolve() if records_raw else None

    # 2) Filters, aggregation and display options
    return AppConfig(
        records_file=records_file,
        filters=_parse_filters(_section(raw, "filters")),
        aggregation=_parse_aggregation(_section(raw, "aggregation")),
        display=_parse_display(_section(raw, "display")),
    )
