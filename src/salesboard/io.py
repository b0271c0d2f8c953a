# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for SalesBoard.

This module turns raw business records into the canonical DataFrame used by
every other module of the package. Records come from an external data
layer, either already in memory (a DataFrame, a list of dicts, a list of
``Record`` objects) or as a CSV export.

Expected columns
----------------
Column names are case-insensitive and surrounding whitespace is ignored.

    - ``year``              (int, required)
    - ``month``             (int 1-12, required)
    - ``business_unit_id``  (identifier, required; aliases: ``bu_id``,
                             ``business_unit``)
    - ``target``            (number, optional, missing values -> 0)
    - ``actual``            (number, optional, missing values -> 0)
    - ``amount``            (number, optional)
    - ``status``            (str, optional)
    - ``customer``          (str, optional; alias: ``customer_name``)

Output schema
-------------
The canonical frame always contains ``period_key, year, month,
business_unit_id, target, actual`` and keeps ``amount``, ``status`` and
``customer`` when they were provided. Any other input column is dropped.

If the structure cannot be normalized (missing required columns, non
integer year/month, missing business unit ids), a ValueError with a clear
message is raised. Months outside 1-12 or with a fractional part raise
``InvalidMonthError``. Integer ids read as floats (1.0) are restored to
integers.
"""

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any, Optional, Union

import pandas as pd

from .periods import InvalidMonthError, to_key

logger = logging.getLogger(__name__)

BASE_COLUMNS: list[str] = [
    "period_key",
    "year",
    "month",
    "business_unit_id",
    "target",
    "actual",
]
OPTIONAL_COLUMNS: list[str] = ["amount", "status", "customer"]

_ALIASES: dict[str, str] = {
    "bu_id": "business_unit_id",
    "business_unit": "business_unit_id",
    "customer_name": "customer",
}


@dataclass(frozen=True)
class Record:
    """One raw business data point (e.g. a monthly target/actual entry)."""

    year: int
    month: int
    business_unit_id: Any
    target: float = 0.0
    actual: float = 0.0
    amount: Optional[float] = None
    status: Optional[str] = None
    customer: Optional[str] = None

    @property
    def period_key(self) -> int:
        return to_key(self.year, self.month)


RecordsLike = Union[pd.DataFrame, Iterable[Union[Record, Mapping[str, Any]]]]


def empty_records_frame() -> pd.DataFrame:
    """Return an empty frame with the canonical base columns."""
    return pd.DataFrame(columns=BASE_COLUMNS)


def _to_frame(data: RecordsLike) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        return data.copy()

    rows: list[dict[str, Any]] = []
    for item in data:
        if isinstance(item, Record):
            row = asdict(item)
            # Optional fields left to None are treated as absent.
            rows.append({k: v for k, v in row.items() if v is not None})
        elif isinstance(item, Mapping):
            rows.append(dict(item))
        else:
            raise ValueError(
                f"Unsupported record type: {type(item).__name__}, expected "
                "Record or mapping."
            )
    return pd.DataFrame(rows)


def _coerce_numeric(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Coerce a value column to float, treating missing values as 0."""
    if column not in df.columns:
        df[column] = 0.0
        return df

    values = pd.to_numeric(df[column], errors="coerce")
    missing = int(values.isna().sum())
    if missing:
        logger.warning(
            "%d record(s) without a numeric %r value, counted as 0.", missing, column
        )
    df[column] = values.fillna(0.0).astype(float)
    return df


def _clean_unit_ids(units: pd.Series) -> pd.Series:
    """
    Reject missing business unit ids and undo float upcasting.

    A blank cell makes pandas read an integer id column as float; ids such
    as 1.0 are turned back into 1 so they match "1" in filters.
    """
    if units.isna().any() or (units.astype(str).str.strip() == "").any():
        raise ValueError("Missing values in 'business_unit_id' column.")
    if pd.api.types.is_float_dtype(units) and (units % 1 == 0).all():
        return units.astype(int)
    return units


def normalize_records(data: RecordsLike) -> pd.DataFrame:
    """
    Normalize raw records into the canonical SalesBoard frame.

    Parameters
    ----------
    data:
        A DataFrame, or an iterable of ``Record`` objects / mappings.

    Returns
    -------
    pandas.DataFrame
        A new DataFrame (the input is never modified) with the canonical
        columns described in the module docstring.

    Raises
    ------
    ValueError
        If required columns are missing, year/month are not integers or a
        business unit id is missing.
    InvalidMonthError
        If a month is outside 1-12 or not a whole number.
    """
    df = _to_frame(data)

    if df.empty and len(df.columns) == 0:
        return empty_records_frame()

    df.columns = [str(c).lower().strip() for c in df.columns]
    df = df.rename(columns={k: v for k, v in _ALIASES.items() if v not in df.columns})

    missing = [c for c in ("year", "month", "business_unit_id") if c not in df.columns]
    if missing:
        raise ValueError(
            "Invalid records structure, missing column(s): "
            + ", ".join(missing)
            + ". Expected at least: year, month, business_unit_id."
        )

    for col in ("year", "month"):
        values = pd.to_numeric(df[col], errors="coerce")
        if values.isna().any():
            raise ValueError(f"Invalid numeric values in {col!r} column.")
        fractional = values[values % 1 != 0]
        if not fractional.empty:
            if col == "month":
                raise InvalidMonthError(fractional.iloc[0])
            raise ValueError(f"Non-integer values in {col!r} column.")
        df[col] = values.astype(int)

    df["business_unit_id"] = _clean_unit_ids(df["business_unit_id"])

    df["period_key"] = [to_key(y, m) for y, m in zip(df["year"], df["month"])]

    df = _coerce_numeric(df, "target")
    df = _coerce_numeric(df, "actual")
    if "amount" in df.columns:
        df = _coerce_numeric(df, "amount")
    if "status" in df.columns:
        df["status"] = df["status"].fillna("").astype(str)

    columns = BASE_COLUMNS + [c for c in OPTIONAL_COLUMNS if c in df.columns]
    out = df[columns].reset_index(drop=True)

    logger.debug("Normalized %d record(s).", len(out))
    return out


def read_records(path: Union[str, "os.PathLike[str]"]) -> pd.DataFrame:
    """
    Read records from a CSV file and normalize them.

    Parameters
    ----------
    path:
        Path to a CSV export with the columns described in the module
        docstring (case-insensitive).

    Returns
    -------
    pandas.DataFrame
        Canonical records frame (see ``normalize_records``).
    """
    df = pd.read_csv(path)
    logger.debug("Read %d row(s) from %s.", len(df), path)
    return normalize_records(df)
