# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Running totals over aggregated period rows.

``cumulate()`` walks rows sorted ascending by period key and adds, for each
row, the running sums of target and actual since the start of its scope:

    cumulative_target     = sum(target) of rows 0..i in the scope
    cumulative_actual     = sum(actual) of rows 0..i in the scope
    cumulative_difference = cumulative_actual - cumulative_target
    cumulative_percentage = round(cumulative_actual / cumulative_target * 100)
                            or 0 when cumulative_target is 0

A scope is one calendar year (CumulativeScope.YEAR, the default) or the
whole series (CumulativeScope.ALL_YEARS). Rows of different business units
never share running sums.

The function is pure: it reads only its arguments, returns a new DataFrame
and gives the same result every time it is called on the same input.
"""

from enum import Enum

import pandas as pd

from .aggregation import round_half_up

CUMULATIVE_COLUMNS: list[str] = [
    "cumulative_target",
    "cumulative_actual",
    "cumulative_difference",
    "cumulative_percentage",
]


class CumulativeScope(str, Enum):
    """Where running totals restart."""

    YEAR = "year"
    ALL_YEARS = "all_years"


def _cumulative_percentage(actual: float, target: float) -> int:
    if target > 0:
        return int(round_half_up(actual / target * 100, 0))
    return 0


def cumulate(
    rows: pd.DataFrame,
    scope: CumulativeScope = CumulativeScope.YEAR,
) -> pd.DataFrame:
    """
    Add running totals to period rows.

    Parameters
    ----------
    rows :
        Aggregated rows (see ``aggregation.aggregate``) already sorted
        ascending by period key, e.g. with ``aggregation.sort_by_period``.
    scope :
        CumulativeScope.YEAR restarts the sums at each year boundary;
        CumulativeScope.ALL_YEARS accumulates over the whole input.

    Returns
    -------
    pandas.DataFrame
        A copy of ``rows`` with the CUMULATIVE_COLUMNS appended.

    Raises
    ------
    ValueError
        If the rows are not sorted by period key.
    """
    scope = CumulativeScope(scope)
    columns = list(rows.columns) + [c for c in CUMULATIVE_COLUMNS if c not in rows.columns]

    if rows.empty:
        return pd.DataFrame(columns=columns)

    df = rows.copy().reset_index(drop=True)
    keys = df["year"].astype(int) * 100 + df["month"].astype(int)
    if not keys.is_monotonic_increasing:
        raise ValueError(
            "Rows must be sorted ascending by period key before computing "
            "running totals (see sort_by_period)."
        )

    groupers: list[pd.Series] = []
    if scope is CumulativeScope.YEAR:
        groupers.append(df["year"].astype(int))
    if "business_unit_id" in df.columns:
        groupers.append(df["business_unit_id"].astype(str))

    values = df[["target", "actual"]].astype(float)
    if groupers:
        running = values.groupby(groupers, sort=False).cumsum()
    else:
        running = values.cumsum()

    df["cumulative_target"] = running["target"]
    df["cumulative_actual"] = running["actual"]
    df["cumulative_difference"] = df["cumulative_actual"] - df["cumulative_target"]
    df["cumulative_percentage"] = [
        _cumulative_percentage(a, t)
        for a, t in zip(df["cumulative_actual"], df["cumulative_target"])
    ]
    return df[columns]
