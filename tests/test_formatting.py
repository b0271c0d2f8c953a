import math

import pandas as pd
import pytest

import salesboard.formatting as formatting


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0"),
        (999, "999"),
        (1_000, "1K"),
        (15_400, "15K"),
        (1_500_000, "1.5M"),
        (-2_500_000, "-2.5M"),
        (None, "0"),
        (math.nan, "0"),
    ],
)
def test_compact_formatter(value, expected) -> None:
    assert formatting.COMPACT.format(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (1_500_000_000, "Rp 1.5 Miliar"),
        (2_300_000, "Rp 2.3 Juta"),
        (7_500, "Rp 7.5 Ribu"),
        (850, "Rp 850"),
        (-2_300_000, "-Rp 2.3 Juta"),
    ],
)
def test_idr_formatter(value, expected) -> None:
    assert formatting.IDR(value) == expected


def test_idr_short_formatter() -> None:
    assert formatting.IDR_SHORT.format(3_000_000_000) == "3.0 M"
    assert formatting.IDR_SHORT.format(12_000_000) == "12.0 Jt"
    assert formatting.IDR_SHORT.format(4_000) == "4.0 Rb"


def test_custom_decimal_separator() -> None:
    fmt = formatting.NumberFormatter(
        name="eu",
        thresholds=(formatting.Threshold(1_000, 1_000, "k", decimals=2),),
        decimal_separator=",",
    )

    assert fmt.format(1_234) == "1,23k"


def test_get_formatter() -> None:
    assert formatting.get_formatter("IDR") is formatting.IDR
    assert formatting.get_formatter(" compact ") is formatting.COMPACT

    with pytest.raises(ValueError):
        formatting.get_formatter("roman")


def test_format_signed_and_percentage() -> None:
    assert formatting.format_signed(2_000) == "+2K"
    assert formatting.format_signed(0) == "+0"
    assert formatting.format_signed(-2_000) == "-2K"

    assert formatting.format_percentage(105) == "105%"
    assert formatting.format_percentage(103.846, 2) == "103.85%"
    assert formatting.format_percentage(None) == "N/A"


def test_format_columns_adds_display_columns() -> None:
    df = pd.DataFrame({"target": [1_000_000.0, 500.0], "other": [1, 2]})

    out = formatting.format_columns(df, ["target", "missing"])

    assert out["target_display"].tolist() == ["1.0M", "500"]
    assert "missing_display" not in out.columns
    assert "target_display" not in df.columns


def test_values_below_thresholds_are_printed_as_is() -> None:
    """Small values keep their decimals and zero never gets a sign."""
    assert formatting.COMPACT.format(999.6) == "999.6"
    assert formatting.COMPACT.format(-0.4) == "-0.4"
    assert formatting.COMPACT.format(12.0) == "12"
    assert formatting.IDR.format(0.5) == "Rp 0.5"

    rounded = formatting.NumberFormatter(
        name="rounded", thresholds=formatting.COMPACT.thresholds, base_decimals=0
    )
    assert rounded.format(-0.4) == "0"
    assert rounded.format(999.6) == "1000"
