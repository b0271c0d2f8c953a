# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Category breakdowns used by the dashboard side charts.

Besides the target/actual period series, the dashboard shows a few small
breakdowns computed from already filtered records:

- purchase orders by status (count, amount and share of each status),
- the top customers by purchase order value,
- quotation amounts per business unit with an acceptance rate,
- monthly activity counts (inquiries, quotations, purchase orders),
- month-over-month growth of a counter and its KPI card sentence.

Each function takes DataFrames and returns a new DataFrame (or a small
frozen result object). Empty inputs give empty, well-formed results.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

import pandas as pd

from .aggregation import round_half_up, sort_by_period
from .filters import ALL
from .series import axis_label, period_label

logger = logging.getLogger(__name__)

KNOWN_STATUSES: tuple[str, ...] = ("wip", "ar", "ibt")
OTHER_STATUS = "other"

STATUS_LABELS: dict[str, str] = {
    "wip": "Work in Progress",
    "ar": "Account Receivable",
    "ibt": "Income Before Tax",
    OTHER_STATUS: "Other status",
}

STATUS_COLUMNS: list[str] = ["status", "label", "count", "value", "share"]
ACTIVITY_COUNTERS: tuple[str, ...] = ("inquiry", "quotation", "po")


# ---------------------------------------------------------------------------
# Purchase orders by status
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatusBreakdown:
    """
    Purchase orders grouped by status.

    Attributes:
        data: One row per status with STATUS_COLUMNS. ``share`` is the
            rounded percentage of the order count.
        total_count: Number of orders.
        total_value: Sum of order amounts.
    """

    data: pd.DataFrame
    total_count: int
    total_value: float


def status_breakdown(
    orders: pd.DataFrame,
    known_statuses: Iterable[str] = KNOWN_STATUSES,
) -> StatusBreakdown:
    """
    Count and sum purchase orders per status.

    Status names are compared case-insensitively; statuses outside
    ``known_statuses`` are grouped under "other". Rows come out in the order
    of ``known_statuses`` followed by "other", and only statuses that occur
    are listed.
    """
    if orders.empty:
        return StatusBreakdown(
            data=pd.DataFrame(columns=STATUS_COLUMNS), total_count=0, total_value=0.0
        )

    known = [s.lower() for s in known_statuses]
    df = orders.copy()
    status = df.get("status", pd.Series("", index=df.index)).fillna("")
    status = status.astype(str).str.strip().str.lower()
    df["status"] = status.where(status.isin(known), OTHER_STATUS)
    if "amount" in df.columns:
        df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
    else:
        df["amount"] = 0.0

    grouped = df.groupby("status").agg(count=("amount", "size"), value=("amount", "sum"))

    total_count = int(len(df))
    total_value = float(df["amount"].sum())
    logger.debug("Status breakdown over %d order(s).", total_count)

    rows: list[dict[str, Any]] = []
    for name in known + [OTHER_STATUS]:
        if name not in grouped.index:
            continue
        count = int(grouped.at[name, "count"])
        rows.append(
            {
                "status": name,
                "label": STATUS_LABELS.get(name, name.upper()),
                "count": count,
                "value": float(grouped.at[name, "value"]),
                "share": int(round_half_up(count / total_count * 100, 0)),
            }
        )

    return StatusBreakdown(
        data=pd.DataFrame(rows, columns=STATUS_COLUMNS),
        total_count=total_count,
        total_value=total_value,
    )


# ---------------------------------------------------------------------------
# Top customers
# ---------------------------------------------------------------------------


def top_customers(
    rows: pd.DataFrame,
    business_unit_id: Any = ALL,
    limit: int = 10,
) -> pd.DataFrame:
    """
    Return the customers with the highest purchase order value.

    ``rows`` holds pre-computed customer totals with ``customer`` (or
    ``name``), ``value`` and ``business_unit_id`` columns, and optionally
    ``po_count``. Totals for "all business units" are usually shipped as
    rows tagged ``business_unit_id = "all"``; when ``business_unit_id`` is
    "all" those rows are used, falling back to every row if none is tagged.

    The result is sorted by value (descending, stable) and truncated to
    ``limit`` rows.
    """
    columns = ["customer", "value", "po_count", "business_unit_id"]
    if rows.empty:
        return pd.DataFrame(columns=columns)

    df = rows.copy()
    if "customer" not in df.columns and "name" in df.columns:
        df = df.rename(columns={"name": "customer"})
    if "po_count" not in df.columns and "pocount" in [c.lower() for c in df.columns]:
        source = next(c for c in df.columns if c.lower() == "pocount")
        df = df.rename(columns={source: "po_count"})
    if "po_count" not in df.columns:
        df["po_count"] = 0
    df["value"] = pd.to_numeric(df["value"], errors="coerce").fillna(0.0)

    unit_ids = df["business_unit_id"].astype(str)
    if business_unit_id == ALL:
        tagged = df.loc[unit_ids == ALL]
        selected = tagged if not tagged.empty else df
    else:
        selected = df.loc[unit_ids == str(business_unit_id)]

    out = selected.sort_values("value", ascending=False, kind="stable").head(limit)
    return out[columns].reset_index(drop=True)


# ---------------------------------------------------------------------------
# Quotations per business unit
# ---------------------------------------------------------------------------


def _units_frame(
    business_units: Union[pd.DataFrame, Iterable[Mapping[str, Any]]],
) -> pd.DataFrame:
    if isinstance(business_units, pd.DataFrame):
        return business_units[["id", "name"]].copy()
    return pd.DataFrame(list(business_units), columns=["id", "name"])


def business_unit_totals(
    quotations: pd.DataFrame,
    business_units: Union[pd.DataFrame, Iterable[Mapping[str, Any]]],
    accepted_status: str = "accepted",
) -> pd.DataFrame:
    """
    Sum quotation amounts per business unit.

    Every business unit gets a row, even without quotations. Columns:
    ``business_unit_id, name, value, count, success_rate`` where
    ``success_rate`` is the percentage (one decimal) of quotations with
    ``accepted_status``. Rows are sorted by value, highest first.
    """
    columns = ["business_unit_id", "name", "value", "count", "success_rate"]
    units = _units_frame(business_units)
    if units.empty:
        return pd.DataFrame(columns=columns)

    if quotations.empty:
        quotes = pd.DataFrame(columns=["business_unit_id", "amount", "status"])
    else:
        quotes = quotations.copy()
    unit_ids = quotes["business_unit_id"].astype(str)
    amounts = pd.to_numeric(
        quotes.get("amount", pd.Series(0.0, index=quotes.index)), errors="coerce"
    ).fillna(0.0)
    statuses = quotes.get("status", pd.Series("", index=quotes.index)).fillna("")

    rows: list[dict[str, Any]] = []
    for unit in units.itertuples(index=False):
        in_unit = unit_ids == str(unit.id)
        count = int(in_unit.sum())
        accepted = int((statuses[in_unit].astype(str) == accepted_status).sum())
        rows.append(
            {
                "business_unit_id": unit.id,
                "name": unit.name,
                "value": float(amounts[in_unit].sum()),
                "count": count,
                "success_rate": (
                    round_half_up(accepted / count * 100, 1) if count else 0.0
                ),
            }
        )

    out = pd.DataFrame(rows, columns=columns)
    return out.sort_values("value", ascending=False, kind="stable").reset_index(
        drop=True
    )


# ---------------------------------------------------------------------------
# Monthly activity counts
# ---------------------------------------------------------------------------


def activity_by_period(
    rows: pd.DataFrame,
    business_unit_id: Any = ALL,
) -> pd.DataFrame:
    """
    Monthly inquiry / quotation / purchase order counts, oldest first.

    ``rows`` has ``year``, ``month``, ``business_unit_id`` and the counter
    columns ``inquiry``, ``quotation`` and ``po``. For "all", rows tagged
    "all" are used when present; otherwise counts of every unit are summed
    per month.
    """
    columns = ["period", "axis_label", "period_key", "year", "month", *ACTIVITY_COUNTERS]
    if rows.empty:
        return pd.DataFrame(columns=columns)

    df = rows.copy()
    for counter in ACTIVITY_COUNTERS:
        if counter not in df.columns:
            df[counter] = 0
        df[counter] = pd.to_numeric(df[counter], errors="coerce").fillna(0).astype(int)

    unit_ids = df["business_unit_id"].astype(str)
    if business_unit_id == ALL:
        tagged = df.loc[unit_ids == ALL]
        selected = tagged if not tagged.empty else df
    else:
        selected = df.loc[unit_ids == str(business_unit_id)]

    if selected.empty:
        return pd.DataFrame(columns=columns)

    grouped = (
        selected.groupby(["year", "month"], sort=False)[list(ACTIVITY_COUNTERS)]
        .sum()
        .reset_index()
    )
    grouped["year"] = grouped["year"].astype(int)
    grouped["month"] = grouped["month"].astype(int)
    grouped = sort_by_period(grouped)
    grouped["period"] = [period_label(y, m) for y, m in zip(grouped["year"], grouped["month"])]
    grouped["axis_label"] = [axis_label(y, m) for y, m in zip(grouped["year"], grouped["month"])]
    return grouped[columns]


# ---------------------------------------------------------------------------
# Growth
# ---------------------------------------------------------------------------


def growth_rate(current: float, previous: float) -> Optional[float]:
    """
    Percentage change from ``previous`` to ``current`` (one decimal).

    Returns None when the previous value is 0 but the current one is not
    (the change cannot be expressed as a percentage), and 0.0 when both
    are 0.
    """
    if previous > 0:
        return round_half_up((current - previous) / previous * 100, 1)
    if current > 0:
        return None
    return 0.0


# Insight sentences of the KPI cards, per metric: (positive trend at or
# above GROWTH_HIGHLIGHT, small positive trend, zero or negative trend).
GROWTH_HIGHLIGHT = 10.0

_INSIGHTS: dict[str, tuple[str, str, str]] = {
    "inquiries": (
        "{trend} {growth}% dibanding bulan sebelumnya → tren positif.",
        "{trend} {growth}% dibanding bulan sebelumnya → stabil.",
        "{trend} {growth}% dibanding bulan sebelumnya → perlu strategi marketing.",
    ),
    "quotations": (
        "{trend} {growth}% bulan ini → indikasi adanya ketertarikan dari customer.",
        "{trend} {growth}% bulan ini → performa stabil.",
        "{trend} {growth}% bulan ini → perlu follow-up lebih aktif.",
    ),
    "pos": (
        "{trend} {growth}% → pertumbuhan signifikan.",
        "{trend} {growth}% → kecil tapi bertumbuh.",
        "{trend} {growth}% → perlu evaluasi strategi penjualan.",
    ),
    # More expired quotations is bad news, whatever the size of the rise.
    "expired": (
        "{trend} {growth}% → perlu diperhatikan.",
        "{trend} {growth}% → perlu diperhatikan.",
        "{trend} {growth}% → performa tim sales membaik.",
    ),
}

NO_BASELINE_INSIGHT = "Belum ada data bulan lalu sebagai pembanding."


def growth_insight(metric: str, growth: Optional[float]) -> str:
    """
    Short trend sentence shown under a KPI card.

    ``metric`` is one of "inquiries", "quotations", "pos" or "expired";
    other names get a generic sentence. ``growth`` comes from
    ``growth_rate()``; None (no baseline last month) gets
    NO_BASELINE_INSIGHT.
    """
    if growth is None:
        return NO_BASELINE_INSIGHT

    trend = "Naik" if growth >= 0 else "Turun"
    values = {"trend": trend, "growth": f"{abs(growth):g}"}

    templates = _INSIGHTS.get(metric)
    if templates is None:
        return "{trend} {growth}% dari bulan lalu.".format(**values)

    high, low, down = templates
    if growth >= GROWTH_HIGHLIGHT:
        return high.format(**values)
    if growth > 0:
        return low.format(**values)
    return down.format(**values)
