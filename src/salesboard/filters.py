# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Filter selections and record predicates for SalesBoard.

A dashboard chart keeps a small piece of UI state: the selected business
unit, the selected year and a date range (all time, current month, last N
months, a custom range or one specific month). This module turns such a
``FilterSelection`` into a ``RecordPredicate`` that can be evaluated on a
single record or, vectorized, on a whole records DataFrame.

All period comparisons are done on integer period keys (see periods.py).

Date range kinds
----------------
- ALL:             no period restriction.
- CURRENT_MONTH:   the calendar month of "today", if present in the data.
- LAST_N_MONTHS:   walk back N months (3, 6 or 12) from the current month,
                   keeping only months present in the data. Missing months
                   are never synthesized.
- CUSTOM_RANGE:    inclusive [start_key, end_key]. When one bound is absent
                   only the other one is enforced.
- CUSTOM_SPECIFIC: exactly one (year, month).

Business unit and year filters are independent and combine with any date
range; the value "all" disables them.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional, Union

import pandas as pd

from .periods import (
    Period,
    available_periods,
    current_period,
    from_key,
    shift,
    to_key,
)

logger = logging.getLogger(__name__)

ALL = "all"
LOOKBACK_CHOICES: tuple[int, ...] = (3, 6, 12)


class DateRange(str, Enum):
    """Kinds of period restriction a selection can apply."""

    ALL = "all"
    CURRENT_MONTH = "current-month"
    LAST_N_MONTHS = "last-n-months"
    CUSTOM_RANGE = "custom-range"
    CUSTOM_SPECIFIC = "custom-specific"


@dataclass(frozen=True)
class FilterSelection:
    """
    Snapshot of the filter controls of one chart.

    Attributes
    ----------
    business_unit_id :
        "all" or the identifier of one business unit. Identifiers are
        compared as strings, so 2 and "2" select the same unit.
    year :
        "all" or a calendar year.
    date_range :
        Kind of period restriction (see DateRange).
    lookback_months :
        N for LAST_N_MONTHS, one of 3, 6 or 12.
    start_key, end_key :
        Inclusive bounds for CUSTOM_RANGE (period keys, either may be None).
    specific_year, specific_month :
        The month selected by CUSTOM_SPECIFIC.
    value_type :
        Optional hint of which value the chart displays (e.g. "count" or
        "value" for status charts). Not used for filtering.
    """

    business_unit_id: Any = ALL
    year: Union[str, int] = ALL
    date_range: DateRange = DateRange.ALL
    lookback_months: int = 6
    start_key: Optional[int] = None
    end_key: Optional[int] = None
    specific_year: Optional[int] = None
    specific_month: Optional[int] = None
    value_type: Optional[str] = None

    @classmethod
    def last_n_months(cls, months: int, **kwargs: Any) -> "FilterSelection":
        return cls(date_range=DateRange.LAST_N_MONTHS, lookback_months=months, **kwargs)

    @classmethod
    def custom_range(
        cls,
        start: Optional[Period] = None,
        end: Optional[Period] = None,
        **kwargs: Any,
    ) -> "FilterSelection":
        return cls(
            date_range=DateRange.CUSTOM_RANGE,
            start_key=start.key if start is not None else None,
            end_key=end.key if end is not None else None,
            **kwargs,
        )

    @classmethod
    def specific(
        cls, specific_year: int, specific_month: int, **kwargs: Any
    ) -> "FilterSelection":
        """One month; ``year=`` in kwargs stays the independent year filter."""
        return cls(
            date_range=DateRange.CUSTOM_SPECIFIC,
            specific_year=specific_year,
            specific_month=specific_month,
            **kwargs,
        )


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class RecordPredicate:
    """
    Predicate over records built by ``build_predicate``.

    ``allowed_keys`` set to None means "no period-set restriction"; an empty
    frozenset means "no period is allowed". ``min_key``/``max_key`` are
    inclusive bounds, each optional.
    """

    business_unit_id: Any = ALL
    year: Union[str, int] = ALL
    allowed_keys: Optional[frozenset[int]] = None
    min_key: Optional[int] = None
    max_key: Optional[int] = None

    def _accepts_key(self, key: int) -> bool:
        if self.allowed_keys is not None and key not in self.allowed_keys:
            return False
        if self.min_key is not None and key < self.min_key:
            return False
        if self.max_key is not None and key > self.max_key:
            return False
        return True

    def __call__(self, record: Any) -> bool:
        """Evaluate the predicate on one record (mapping or Record)."""
        if self.business_unit_id != ALL and str(
            _field(record, "business_unit_id")
        ) != str(self.business_unit_id):
            return False

        year = int(_field(record, "year"))
        if self.year != ALL and year != int(self.year):
            return False

        return self._accepts_key(to_key(year, _field(record, "month")))

    def mask(self, records: pd.DataFrame) -> pd.Series:
        """Vectorized evaluation over a canonical records DataFrame."""
        mask = pd.Series(True, index=records.index)
        if records.empty:
            return mask

        if self.business_unit_id != ALL:
            mask &= records["business_unit_id"].astype(str) == str(
                self.business_unit_id
            )
        if self.year != ALL:
            mask &= records["year"] == int(self.year)

        keys = records["year"] * 100 + records["month"]
        if self.allowed_keys is not None:
            mask &= keys.isin(list(self.allowed_keys))
        if self.min_key is not None:
            mask &= keys >= self.min_key
        if self.max_key is not None:
            mask &= keys <= self.max_key
        return mask


def lookback_periods(
    months: int,
    available: Iterable[int],
    today: Optional[date] = None,
) -> list[int]:
    """
    Return the period keys of the last ``months`` calendar months that exist
    in ``available``, most recent first.

    The walk starts at the current month (included) and goes back one month
    at a time; months absent from ``available`` are skipped, not replaced.
    """
    available_keys = set(available)
    period = current_period(today)

    result: list[int] = []
    for _ in range(months):
        if period.key in available_keys:
            result.append(period.key)
        period = shift(period, -1)
    return result


def build_predicate(
    selection: FilterSelection,
    available: Iterable[int],
    today: Optional[date] = None,
) -> RecordPredicate:
    """
    Build the predicate matching a filter selection.

    Parameters
    ----------
    selection:
        The current filter selection.
    available:
        Period keys present in the dataset. Relative ranges (current month,
        last N months) only ever select keys from this set; an empty set
        yields a predicate that matches nothing for those ranges.
    today:
        Reference date for relative ranges (defaults to the current date).

    Raises
    ------
    ValueError
        If the selection is inconsistent (unsupported lookback, custom range
        with end before start, incomplete specific month).
    """
    available_keys = frozenset(available)
    common = {"business_unit_id": selection.business_unit_id, "year": selection.year}
    kind = DateRange(selection.date_range)

    if kind is DateRange.ALL:
        return RecordPredicate(**common)

    if kind is DateRange.CURRENT_MONTH:
        key = current_period(today).key
        allowed = frozenset({key}) & available_keys
        return RecordPredicate(allowed_keys=allowed, **common)

    if kind is DateRange.LAST_N_MONTHS:
        months = selection.lookback_months
        if months not in LOOKBACK_CHOICES:
            raise ValueError(
                f"Unsupported lookback: {months!r} months, expected one of "
                f"{LOOKBACK_CHOICES}."
            )
        allowed = frozenset(lookback_periods(months, available_keys, today))
        return RecordPredicate(allowed_keys=allowed, **common)

    if kind is DateRange.CUSTOM_RANGE:
        start, end = selection.start_key, selection.end_key
        # Validate the month part of each bound.
        for bound in (start, end):
            if bound is not None:
                from_key(bound)
        if start is not None and end is not None and end < start:
            raise ValueError("Custom range end period cannot be before start period.")
        return RecordPredicate(min_key=start, max_key=end, **common)

    if kind is DateRange.CUSTOM_SPECIFIC:
        if selection.specific_year is None or selection.specific_month is None:
            raise ValueError("A specific month selection needs both year and month.")
        key = to_key(selection.specific_year, selection.specific_month)
        return RecordPredicate(allowed_keys=frozenset({key}), **common)

    raise ValueError(f"Unknown date range: {selection.date_range!r}")


def apply_selection(
    records: pd.DataFrame,
    selection: FilterSelection,
    today: Optional[date] = None,
) -> pd.DataFrame:
    """
    Filter a canonical records DataFrame with a selection.

    Available periods are derived from ``records`` itself. Returns a new
    DataFrame; an empty result is a valid outcome.
    """
    predicate = build_predicate(selection, available_periods(records), today)
    filtered = records.loc[predicate.mask(records)].copy()
    logger.debug(
        "Selection %s kept %d of %d record(s).",
        DateRange(selection.date_range).value,
        len(filtered),
        len(records),
    )
    return filtered


def describe_selection(selection: FilterSelection, today: Optional[date] = None) -> str:
    """Return a short human-readable description of the date range."""
    kind = DateRange(selection.date_range)

    if kind is DateRange.ALL:
        return "All time"
    if kind is DateRange.CURRENT_MONTH:
        return f"Current month ({current_period(today).label})"
    if kind is DateRange.LAST_N_MONTHS:
        return f"Last {selection.lookback_months} months"
    if kind is DateRange.CUSTOM_RANGE:
        start, end = selection.start_key, selection.end_key
        if start is not None and end is not None:
            return f"{from_key(start).label} to {from_key(end).label}"
        if start is not None:
            return f"Since {from_key(start).label}"
        if end is not None:
            return f"Until {from_key(end).label}"
        return "All time"
    if selection.specific_year is None or selection.specific_month is None:
        return "Specific month"
    return Period(selection.specific_year, selection.specific_month).label


def default_year(records: pd.DataFrame, today: Optional[date] = None) -> Union[str, int]:
    """
    Pick the initial year of a year selector.

    The current year when the data contains it, otherwise the most recent
    year of the data, otherwise "all" for an empty dataset.
    """
    if records.empty:
        return ALL
    years = sorted({int(y) for y in records["year"]}, reverse=True)
    current_year = current_period(today).year
    if current_year in years:
        return current_year
    return years[0]
