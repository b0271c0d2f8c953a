# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Number formatting strategies for axis ticks, tooltips and tables.

Dashboards abbreviate large amounts with a magnitude suffix. The suffixes
depend on the audience: generic "K"/"M", or the Indonesian "Ribu", "Juta"
and "Miliar". Rather than one formatting function per chart, a single
``NumberFormatter`` is parameterized by a threshold table:

    COMPACT    >= 1e6 -> "1.5M"        >= 1e3 -> "15K"          else "999"
    IDR        >= 1e9 -> "Rp 1.5 Miliar"  >= 1e6 -> "Rp 1.5 Juta"
               >= 1e3 -> "Rp 1.5 Ribu"    else "Rp 999"
    IDR_SHORT  >= 1e9 -> "1.5 M"  >= 1e6 -> "1.5 Jt"  >= 1e3 -> "1.5 Rb"

Thresholds apply to the magnitude of the value; negative values keep
their sign. Values below every threshold are printed as they are
(999.6 stays "999.6"), and a value that prints as zero has no sign.
Formatters are looked up by name with ``get_formatter()`` so that the
display configuration can select one.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class Threshold:
    """Values whose magnitude is >= ``minimum`` are divided and suffixed."""

    minimum: float
    divisor: float
    suffix: str
    decimals: int = 1


@dataclass(frozen=True)
class NumberFormatter:
    """
    Magnitude-based number formatter.

    Attributes:
        name: Registry name (e.g. 'compact', 'idr').
        thresholds: Threshold table, largest minimum first.
        prefix: Text put before the number (e.g. 'Rp ').
        decimal_separator: Replaces '.' in the formatted number.
        base_decimals: Decimals for values below every threshold. None
            prints them as they are (whole numbers without decimals).
    """

    name: str
    thresholds: tuple[Threshold, ...]
    prefix: str = ""
    decimal_separator: str = "."
    base_decimals: Optional[int] = None

    def format(self, value: Optional[float]) -> str:
        if value is None or (isinstance(value, float) and math.isnan(value)):
            value = 0.0

        sign = "-" if value < 0 else ""
        magnitude = abs(float(value))

        for t in self.thresholds:
            if magnitude >= t.minimum:
                number = f"{magnitude / t.divisor:.{t.decimals}f}"
                return f"{sign}{self.prefix}{self._localize(number)}{t.suffix}"

        if magnitude.is_integer():
            number = str(int(magnitude))
        elif self.base_decimals is None:
            number = str(magnitude)
        else:
            number = f"{magnitude:.{self.base_decimals}f}"
        if float(number) == 0:
            sign = ""
        return f"{sign}{self.prefix}{self._localize(number)}"

    __call__ = format

    def _localize(self, number: str) -> str:
        if self.decimal_separator == ".":
            return number
        return number.replace(".", self.decimal_separator)


COMPACT = NumberFormatter(
    name="compact",
    thresholds=(
        Threshold(1_000_000, 1_000_000, "M", decimals=1),
        Threshold(1_000, 1_000, "K", decimals=0),
    ),
)

IDR = NumberFormatter(
    name="idr",
    prefix="Rp ",
    thresholds=(
        Threshold(1_000_000_000, 1_000_000_000, " Miliar"),
        Threshold(1_000_000, 1_000_000, " Juta"),
        Threshold(1_000, 1_000, " Ribu"),
    ),
)

IDR_SHORT = NumberFormatter(
    name="idr_short",
    thresholds=(
        Threshold(1_000_000_000, 1_000_000_000, " M"),
        Threshold(1_000_000, 1_000_000, " Jt"),
        Threshold(1_000, 1_000, " Rb"),
    ),
)

FORMATTERS: dict[str, NumberFormatter] = {
    f.name: f for f in (COMPACT, IDR, IDR_SHORT)
}


def get_formatter(name: str) -> NumberFormatter:
    """Return a registered formatter by name (case-insensitive)."""
    key = str(name).strip().lower()
    try:
        return FORMATTERS[key]
    except KeyError as exc:
        raise ValueError(
            f"Unknown number format: {name!r}. "
            f"Expected one of: {', '.join(sorted(FORMATTERS))}."
        ) from exc


def format_signed(value: float, formatter: NumberFormatter = COMPACT) -> str:
    """Format with an explicit '+' for non-negative values (differences)."""
    text = formatter.format(value)
    return text if text.startswith("-") else f"+{text}"


def format_percentage(value: Optional[float], decimals: int = 0) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"{float(value):.{decimals}f}%"


def format_columns(
    df: pd.DataFrame,
    cols: Iterable[str],
    formatter: NumberFormatter = COMPACT,
    suffix: str = "_display",
) -> pd.DataFrame:
    """Add ``<col><suffix>`` text columns formatted with ``formatter``."""
    formatted = df.copy()
    for c in cols:
        if c in formatted.columns:
            formatted[f"{c}{suffix}"] = formatted[c].map(formatter.format)
    return formatted
