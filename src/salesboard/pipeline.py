# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
End-to-end series computation for SalesBoard charts.

This module provides the high-level entry point used by a chart (or the
CLI) to go from raw records to a display-ready series in a *single call*.

Workflow
--------
``compute_series()`` performs, in order:

1. normalization of the raw records (``io.normalize_records``),
2. filtering with the chart's ``FilterSelection``
   (``filters.apply_selection``); available periods are taken from the
   records themselves,
3. aggregation by period, per business unit or all units summed
   (``aggregation.aggregate``),
4. ascending sort by period key (``aggregation.sort_by_period``),
5. optional running totals (``cumulative.cumulate``),
6. mapping to a ``ChartSeries`` (``series.build_series``).

Every step is a pure function of its inputs: recomputing after a filter
change means calling ``compute_series()`` again with the new selection.

Summary
-------
``summarize_series()`` reduces a computed series to the few numbers shown
in the header cards of a chart: latest and average achievement, trend
direction and the highest plotted value. ``achievement_band()`` maps an
achievement percentage to a status band used for coloring.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .aggregation import AggregationMode, aggregate, round_half_up, sort_by_period
from .cumulative import CumulativeScope, cumulate
from .filters import FilterSelection, apply_selection, describe_selection
from .formatting import COMPACT, NumberFormatter
from .io import RecordsLike, normalize_records
from .series import ChartSeries, build_series

logger = logging.getLogger(__name__)

ON_TRACK_THRESHOLD = 100.0
AT_RISK_THRESHOLD = 80.0


def compute_series(
    records: RecordsLike,
    selection: FilterSelection = FilterSelection(),
    mode: AggregationMode = AggregationMode.ALL_UNITS_SUMMED,
    cumulative: bool = False,
    scope: CumulativeScope = CumulativeScope.YEAR,
    formatter: NumberFormatter = COMPACT,
    today: Optional[date] = None,
    decimals: int = 2,
) -> ChartSeries:
    """
    Compute a display-ready chart series from raw records.

    Args:
        records: Raw records (DataFrame, iterable of Record or mappings).
        selection: Filter state of the chart.
        mode: Per business unit or all units summed.
        cumulative: When True, running totals are added to every row.
        scope: Where running totals restart (see CumulativeScope).
        formatter: Number formatter for the display columns.
        today: Reference date for relative date ranges (defaults to the
            system date).
        decimals: Number of decimals kept for ``percentage``.

    Returns:
        A ChartSeries sorted ascending by period key. Its ``meta`` carries
        the selection description, the aggregation mode and whether the
        values are cumulative. No matching record yields an empty series
        with a "no data" message.

    Raises:
        ValueError: For structurally invalid records or selections.
        InvalidMonthError: For months outside 1-12.
    """
    mode = AggregationMode(mode)
    scope = CumulativeScope(scope)

    df = normalize_records(records)
    filtered = apply_selection(df, selection, today=today)

    rows = sort_by_period(aggregate(filtered, mode=mode, decimals=decimals))
    if cumulative:
        rows = cumulate(rows, scope=scope)

    series = build_series(rows, formatter=formatter)
    series.meta.update(
        {
            "selection": describe_selection(selection, today=today),
            "business_unit_id": selection.business_unit_id,
            "year": selection.year,
            "mode": mode.value,
            "cumulative": cumulative,
            "cumulative_scope": scope.value if cumulative else None,
        }
    )

    logger.info(
        "Computed %d series row(s) from %d record(s) (%s, %s).",
        len(series.data),
        len(df),
        series.meta["selection"],
        mode.value,
    )
    return series


@dataclass(frozen=True)
class SeriesSummary:
    """
    Header figures of one chart.

    Attributes:
        period_count: Number of rows in the series.
        first_period: Label of the first period, "" when empty.
        last_period: Label of the last period, "" when empty.
        latest_achievement: Achievement of the last row. The cumulative
            percentage when the series is cumulative, otherwise the
            monthly percentage.
        average_achievement: Mean of the monthly percentages (2 decimals).
        trend: "up", "down" or "flat", comparing the last two achievements.
        highest_value: Largest target or actual value plotted.
    """

    period_count: int
    first_period: str
    last_period: str
    latest_achievement: float
    average_achievement: float
    trend: str
    highest_value: float


def summarize_series(series: ChartSeries) -> SeriesSummary:
    """Reduce a ChartSeries to its header figures (zeros for an empty one)."""
    if not series.has_data:
        return SeriesSummary(
            period_count=0,
            first_period="",
            last_period="",
            latest_achievement=0.0,
            average_achievement=0.0,
            trend="flat",
            highest_value=0.0,
        )

    df = series.data
    column = "cumulative_percentage" if "cumulative_percentage" in df.columns else "percentage"
    achievements = [float(v) for v in df[column]]

    trend = "flat"
    if len(achievements) >= 2:
        if achievements[-1] > achievements[-2]:
            trend = "up"
        elif achievements[-1] < achievements[-2]:
            trend = "down"

    highest = max(float(df["target"].max()), float(df["actual"].max()))

    return SeriesSummary(
        period_count=len(df),
        first_period=str(df["period"].iloc[0]),
        last_period=str(df["period"].iloc[-1]),
        latest_achievement=achievements[-1],
        average_achievement=round_half_up(float(df["percentage"].mean()), 2),
        trend=trend,
        highest_value=highest,
    )


def achievement_band(percentage: float) -> str:
    """Return "on_track" (>= 100), "at_risk" (>= 80) or "behind"."""
    if percentage >= ON_TRACK_THRESHOLD:
        return "on_track"
    if percentage >= AT_RISK_THRESHOLD:
        return "at_risk"
    return "behind"
