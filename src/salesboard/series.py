# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Series helpers for SalesBoard.

This module turns aggregated (or cumulative) period rows into the display
shape expected by the charting layer: a human-readable ``period`` label
("Jan 2024"), the unchanged value fields, the business unit id and text
columns formatted with a NumberFormatter for tooltips and tables.

Rows are kept in the order they are given; sorting is done beforehand with
``aggregation.sort_by_period``. An empty input yields an empty series with
a "no data" message instead of an error.
"""

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from .filters import ALL
from .formatting import COMPACT, NumberFormatter, format_columns
from .periods import month_name

NO_DATA_MESSAGE = "No data available for the selected filters."

LABEL_COLUMNS: list[str] = [
    "period",
    "period_key",
    "year",
    "month",
    "month_name",
    "axis_label",
    "business_unit_id",
]

VALUE_COLUMNS: list[str] = [
    "target",
    "actual",
    "difference",
    "percentage",
    "cumulative_target",
    "cumulative_actual",
    "cumulative_difference",
    "cumulative_percentage",
    "amount",
    "record_count",
]

# Amount-like columns that get a formatted "<col>_display" companion.
DISPLAY_COLUMNS: list[str] = [
    "target",
    "actual",
    "difference",
    "cumulative_target",
    "cumulative_actual",
    "cumulative_difference",
    "amount",
]


@dataclass(frozen=True)
class ChartSeries:
    """
    Display-ready series for one chart.

    Attributes
    ----------
    data :
        One row per period (and business unit), with LABEL_COLUMNS, the
        value columns present in the input and ``<col>_display`` text
        columns.
    message :
        Empty when there is data, otherwise a "no data" indicator for the
        rendering layer.
    meta :
        Free-form context (selection description, formatter name, ...).
    """

    data: pd.DataFrame
    message: str = ""
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return not self.data.empty

    @property
    def periods(self) -> list[str]:
        return list(self.data["period"]) if self.has_data else []

    def to_records(self) -> list[dict[str, Any]]:
        """Return the rows as plain dicts, ready for JSON serialization."""
        if not self.has_data:
            return []
        return self.data.to_dict(orient="records")


def period_label(year: int, month: int) -> str:
    """``'<MonthAbbrev> <Year>'`` label, e.g. ``'Feb 2024'``."""
    return f"{month_name(int(month))} {int(year)}"


def axis_label(year: int, month: int) -> str:
    """Compact tick label, e.g. ``"Feb'24"``."""
    return f"{month_name(int(month))}'{str(int(year))[-2:]}"


def _reorder_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Labels first, then values, then display columns, then the rest."""
    ordered = [c for c in LABEL_COLUMNS + VALUE_COLUMNS if c in df.columns]
    display = [f"{c}_display" for c in DISPLAY_COLUMNS if f"{c}_display" in df.columns]
    rest = [c for c in df.columns if c not in ordered and c not in display]
    return df[ordered + display + rest]


def build_series(
    rows: pd.DataFrame,
    formatter: NumberFormatter = COMPACT,
) -> ChartSeries:
    """
    Map aggregated rows to a display-ready ChartSeries.

    Args:
        rows: Aggregated or cumulative rows with ``year`` and ``month``.
        formatter: Strategy used for the ``<col>_display`` columns.

    Returns:
        A ChartSeries. Value fields are copied unchanged; an empty ``rows``
        produces an empty series carrying NO_DATA_MESSAGE.
    """
    meta = {"number_format": formatter.name}

    if rows.empty:
        columns = LABEL_COLUMNS + [c for c in VALUE_COLUMNS if c in rows.columns]
        return ChartSeries(
            data=pd.DataFrame(columns=columns),
            message=NO_DATA_MESSAGE,
            meta=meta,
        )

    df = rows.copy().reset_index(drop=True)
    df["period"] = [period_label(y, m) for y, m in zip(df["year"], df["month"])]
    df["month_name"] = [month_name(int(m)) for m in df["month"]]
    df["axis_label"] = [axis_label(y, m) for y, m in zip(df["year"], df["month"])]
    if "period_key" not in df.columns:
        df["period_key"] = df["year"].astype(int) * 100 + df["month"].astype(int)
    if "business_unit_id" not in df.columns:
        df["business_unit_id"] = ALL

    df = format_columns(df, DISPLAY_COLUMNS, formatter)

    return ChartSeries(data=_reorder_columns(df), meta=meta)
