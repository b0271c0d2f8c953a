# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core aggregation engine for SalesBoard.

This module groups filtered records by reporting period and sums their
value columns. It is the single place where target/actual rows are
combined, whatever chart ends up displaying them.

1. Grouping
   --------
   ``aggregate()`` groups records by (year, month), optionally keeping one
   row per business unit:

   - AggregationMode.PER_BUSINESS_UNIT: one row per (period, business unit).
   - AggregationMode.ALL_UNITS_SUMMED: one row per period, business units
     summed together. These rows carry ``business_unit_id = "all"``.

   Group keys are the integer year and month columns, never floats.

2. Derived fields
   --------------
   After every sum, ``difference`` and ``percentage`` are recomputed from
   the summed ``target`` and ``actual``:

       difference = actual - target
       percentage = round(actual / target * 100, 2)   if target > 0
                  = 0                                   otherwise

   A zero target is a normal situation (e.g. a month whose target is not
   set yet) and yields 0, never an error, NaN or infinity.

3. Ordering
   --------
   ``aggregate()`` does not sort its output. ``sort_by_period()`` is the
   explicit ascending sort by period key applied before presentation or
   cumulative computation.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

import pandas as pd

from .filters import ALL

logger = logging.getLogger(__name__)

AGGREGATE_COLUMNS: list[str] = [
    "period_key",
    "year",
    "month",
    "business_unit_id",
    "target",
    "actual",
    "difference",
    "percentage",
    "record_count",
]


class AggregationMode(str, Enum):
    """How business units are combined by ``aggregate()``."""

    PER_BUSINESS_UNIT = "per_business_unit"
    ALL_UNITS_SUMMED = "all_units_summed"


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round half away from zero (``round(2.5) == 3``), unlike ``round()``."""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def achievement_percentage(actual: float, target: float, decimals: int = 2) -> float:
    """Return actual/target as a percentage, or 0.0 when target <= 0."""
    if target > 0:
        return round_half_up(actual / target * 100, decimals)
    return 0.0


def derive_fields(rows: pd.DataFrame, decimals: int = 2) -> pd.DataFrame:
    """
    Recompute ``difference`` and ``percentage`` from ``target``/``actual``.

    Returns a new DataFrame; the input is left untouched.
    """
    out = rows.copy()
    out["difference"] = out["actual"] - out["target"]
    out["percentage"] = [
        achievement_percentage(a, t, decimals)
        for a, t in zip(out["actual"], out["target"])
    ]
    return out


def aggregate(
    records: pd.DataFrame,
    mode: AggregationMode = AggregationMode.ALL_UNITS_SUMMED,
    decimals: int = 2,
) -> pd.DataFrame:
    """Group records by period and sum their value columns.

    Input is a records DataFrame with at least ``year``, ``month`` and
    ``business_unit_id`` (as produced by ``io.normalize_records``). Missing
    ``target``/``actual`` columns or values count as 0. When an ``amount``
    column is present it is summed as well.

    Args:
        records: Records that survived filtering.
        mode: Grouping mode (see AggregationMode).
        decimals: Number of decimals kept for ``percentage``.

    Returns:
        A DataFrame with the AGGREGATE_COLUMNS (plus ``amount`` when
        provided), one row per group, in no particular order. An empty
        input yields an empty DataFrame with the same columns.
    """
    mode = AggregationMode(mode)
    has_amount = "amount" in records.columns
    columns = AGGREGATE_COLUMNS + (["amount"] if has_amount else [])

    if records.empty:
        return pd.DataFrame(columns=columns)

    df = records.copy()
    for col in ("target", "actual"):
        if col not in df.columns:
            df[col] = 0.0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)

    sum_columns = ["target", "actual"] + (["amount"] if has_amount else [])
    if has_amount:
        df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)

    keys = ["year", "month"]
    if mode is AggregationMode.PER_BUSINESS_UNIT:
        keys.append("business_unit_id")

    named = {col: (col, "sum") for col in sum_columns}
    grouped = (
        df.groupby(keys, sort=False, dropna=False)
        .agg(record_count=("target", "size"), **named)
        .reset_index()
    )

    if mode is AggregationMode.ALL_UNITS_SUMMED:
        grouped["business_unit_id"] = ALL

    grouped["year"] = grouped["year"].astype(int)
    grouped["month"] = grouped["month"].astype(int)
    grouped["period_key"] = grouped["year"] * 100 + grouped["month"]
    grouped["record_count"] = grouped["record_count"].astype(int)

    out = derive_fields(grouped, decimals=decimals)

    logger.debug(
        "Aggregated %d record(s) into %d row(s) (%s).",
        len(df),
        len(out),
        mode.value,
    )
    return out[columns].reset_index(drop=True)


def sort_by_period(rows: pd.DataFrame) -> pd.DataFrame:
    """
    Return rows sorted ascending by period key (ties by business unit).

    Business unit identifiers are compared as strings so that mixed id
    types never break the sort.
    """
    if rows.empty:
        return rows.reset_index(drop=True)

    df = rows.copy()
    if "period_key" not in df.columns:
        df["period_key"] = df["year"].astype(int) * 100 + df["month"].astype(int)

    by = ["period_key"]
    if "business_unit_id" in df.columns:
        by.append("business_unit_id")

    df = df.sort_values(
        by,
        kind="stable",
        key=lambda s: s.astype(str) if s.name == "business_unit_id" else s,
    )
    return df.reset_index(drop=True)
