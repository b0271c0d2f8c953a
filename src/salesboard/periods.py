# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for SalesBoard.

This module defines the Period value object (a reporting month) and the
integer period key used everywhere a chronological ordering is needed:

    key = year * 100 + month

Two keys compare exactly like the calendar months they encode, including
across year boundaries (202412 < 202501). Grouping and range comparisons
in the rest of the package are always done on these integer keys.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Union

import pandas as pd

MONTH_NAMES: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


class InvalidMonthError(ValueError):
    """Raised when a month number is outside the 1-12 range."""

    def __init__(self, month: object) -> None:
        super().__init__(f"Invalid month: {month!r}, expected an integer in 1-12.")
        self.month = month


def _check_month(month: int) -> int:
    try:
        value = int(month)
    except (TypeError, ValueError) as exc:
        raise InvalidMonthError(month) from exc
    if value != month or not 1 <= value <= 12:
        raise InvalidMonthError(month)
    return value


def to_key(year: int, month: int) -> int:
    """Return the sortable integer key ``year * 100 + month``."""
    return int(year) * 100 + _check_month(month)


def month_name(month: int) -> str:
    """Return the three-letter abbreviation for a month number (1-12)."""
    return MONTH_NAMES[_check_month(month) - 1]


@dataclass(frozen=True, order=True)
class Period:
    """A reporting month.

    Instances order chronologically because ``year`` is compared before
    ``month``, which matches the ordering of their keys.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        _check_month(self.month)

    @property
    def key(self) -> int:
        return to_key(self.year, self.month)

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``'Jan 2024'``."""
        return f"{month_name(self.month)} {self.year}"

    @property
    def iso(self) -> str:
        """``YYYY-MM`` representation used by period pickers."""
        return f"{self.year:04d}-{self.month:02d}"


def from_key(key: int) -> Period:
    """Rebuild a Period from its integer key."""
    year, month = divmod(int(key), 100)
    return Period(year=year, month=month)


def parse_period(value: str) -> Period:
    """
    Parse a ``YYYY-MM`` string into a Period.

    Raises:
        ValueError: if the string is not in ``YYYY-MM`` format.
        InvalidMonthError: if the month part is outside 1-12.
    """
    parts = str(value).strip().split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid period string: {value!r}, expected YYYY-MM.")
    try:
        year = int(parts[0])
        month = int(parts[1])
    except ValueError as exc:
        raise ValueError(
            f"Invalid period string: {value!r}, expected YYYY-MM."
        ) from exc
    return Period(year=year, month=month)


def shift(period: Period, months: int) -> Period:
    """Move a period forward (positive) or backward (negative) by N months."""
    index = period.year * 12 + (period.month - 1) + months
    year, month_index = divmod(index, 12)
    return Period(year=year, month=month_index + 1)


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def current_period(today: Optional[date] = None) -> Period:
    """Return the calendar month containing ``today`` (defaults to now)."""
    today = today or _today()
    return Period(year=today.year, month=today.month)


def key_range(start: Period, end: Period) -> list[int]:
    """Return every period key from ``start`` to ``end`` inclusive."""
    keys: list[int] = []
    current = start
    while current <= end:
        keys.append(current.key)
        current = shift(current, 1)
    return keys


def available_periods(
    records: Union[pd.DataFrame, Iterable[Period]],
) -> list[int]:
    """
    Return the distinct period keys present in a dataset, sorted ascending.

    ``records`` is either a DataFrame with ``year`` and ``month`` columns or
    an iterable of Period objects. An empty input yields an empty list.
    """
    if isinstance(records, pd.DataFrame):
        if records.empty:
            return []
        keys = {
            to_key(year, month)
            for year, month in zip(records["year"], records["month"])
        }
        return sorted(keys)

    return sorted({p.key for p in records})
