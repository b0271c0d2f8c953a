# SalesBoard - Sales operations dashboard analytics
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
SalesBoard
----------

Data pipeline behind a sales-operations dashboard. Raw monthly target and
actual records are filtered by business unit and period, aggregated per
month, optionally accumulated into running totals and shaped into
display-ready chart series.

Main capabilities:
- canonical year/month period keys and labels,
- filter selections (all time, current month, last 3/6/12 months,
  custom ranges, one specific month),
- aggregation per business unit or with all units summed,
- cumulative target/actual with yearly or global scope,
- configurable number formatting (compact, Indonesian Rupiah),
- side breakdowns: purchase orders by status, top customers,
  quotations per business unit, monthly activity counts.

SalesBoard separates computation (pure pandas functions), configuration
(TOML) and presentation (CLI), making it suitable for scripting and as
the backend of a charting front end.


Version: 0.1.0

Usage:
    salesboard --help
"""

__all__ = [
    "aggregation",
    "breakdowns",
    "cumulative",
    "filters",
    "formatting",
    "io",
    "periods",
    "pipeline",
    "series",
]

__version__ = "0.1.0"
