from datetime import date

import pandas as pd
import pytest

import salesboard.pipeline as pipeline
from salesboard.aggregation import AggregationMode
from salesboard.cumulative import CumulativeScope
from salesboard.filters import FilterSelection
from salesboard.formatting import IDR_SHORT
from salesboard.io import Record
from salesboard.periods import Period
from salesboard.series import NO_DATA_MESSAGE, ChartSeries

TODAY = date(2024, 3, 20)


def _records() -> list[dict]:
    return [
        {"year": 2024, "month": 2, "business_unit_id": 1, "target": 100, "actual": 120},
        {"year": 2024, "month": 1, "business_unit_id": 1, "target": 60, "actual": 50},
        {"year": 2024, "month": 1, "business_unit_id": 2, "target": 40, "actual": 40},
        {"year": 2023, "month": 12, "business_unit_id": 2, "target": 80, "actual": 100},
    ]


def test_compute_series_cumulative_within_year() -> None:
    """Filter, aggregate, sort and accumulate in one call."""
    result = pipeline.compute_series(
        _records(),
        FilterSelection(year=2024),
        cumulative=True,
        today=TODAY,
    )

    assert result.periods == ["Jan 2024", "Feb 2024"]
    assert result.data["cumulative_target"].tolist() == [100, 200]
    assert result.data["cumulative_actual"].tolist() == [90, 210]
    assert result.data["cumulative_percentage"].tolist() == [90, 105]
    assert result.meta["cumulative"] is True
    assert result.meta["cumulative_scope"] == "year"
    assert result.meta["mode"] == "all_units_summed"
    assert result.meta["selection"] == "All time"


def test_compute_series_per_business_unit_last_months() -> None:
    selection = FilterSelection.last_n_months(3)

    result = pipeline.compute_series(
        _records(),
        selection,
        mode=AggregationMode.PER_BUSINESS_UNIT,
        today=TODAY,
    )

    assert list(zip(result.data["period_key"], result.data["business_unit_id"])) == [
        (202401, 1),
        (202401, 2),
        (202402, 1),
    ]
    assert "cumulative_target" not in result.data.columns
    assert result.meta["selection"] == "Last 3 months"


def test_compute_series_accepts_dataframe_and_records() -> None:
    as_frame = pipeline.compute_series(pd.DataFrame(_records()), today=TODAY)
    as_objects = pipeline.compute_series(
        [Record(**r) for r in _records()], today=TODAY
    )

    pd.testing.assert_frame_equal(as_frame.data, as_objects.data)


def test_compute_series_no_matching_records() -> None:
    """A selection matching nothing yields the no-data series."""
    result = pipeline.compute_series(
        _records(),
        FilterSelection.custom_range(Period(2025, 1), Period(2025, 6)),
        cumulative=True,
        today=TODAY,
    )

    assert isinstance(result, ChartSeries)
    assert not result.has_data
    assert result.message == NO_DATA_MESSAGE
    assert result.meta["selection"] == "Jan 2025 to Jun 2025"


def test_compute_series_empty_input() -> None:
    result = pipeline.compute_series([], today=TODAY)

    assert not result.has_data
    assert result.message == NO_DATA_MESSAGE


def test_compute_series_all_years_scope_and_formatter() -> None:
    result = pipeline.compute_series(
        _records(),
        cumulative=True,
        scope=CumulativeScope.ALL_YEARS,
        formatter=IDR_SHORT,
        today=TODAY,
    )

    assert result.data["cumulative_target"].tolist() == [80, 180, 280]
    assert result.meta["number_format"] == "idr_short"


def test_compute_series_invalid_selection() -> None:
    with pytest.raises(ValueError):
        pipeline.compute_series(_records(), FilterSelection.last_n_months(4), today=TODAY)


def test_summarize_series() -> None:
    result = pipeline.compute_series(_records(), today=TODAY)

    summary = pipeline.summarize_series(result)

    assert summary.period_count == 3
    assert summary.first_period == "Dec 2023"
    assert summary.last_period == "Feb 2024"
    # Dec 125%, Jan 90%, Feb 120%.
    assert summary.latest_achievement == pytest.approx(120.0)
    assert summary.average_achievement == pytest.approx(111.67)
    assert summary.trend == "up"
    assert summary.highest_value == 120


def test_summarize_cumulative_series_uses_running_percentage() -> None:
    result = pipeline.compute_series(
        _records(), FilterSelection(year=2024), cumulative=True, today=TODAY
    )

    summary = pipeline.summarize_series(result)

    assert summary.latest_achievement == 105
    assert summary.trend == "up"


def test_summarize_empty_series() -> None:
    summary = pipeline.summarize_series(pipeline.compute_series([], today=TODAY))

    assert summary.period_count == 0
    assert summary.trend == "flat"
    assert summary.latest_achievement == 0.0


@pytest.mark.parametrize(
    "percentage, band",
    [(130.0, "on_track"), (100.0, "on_track"), (80.0, "at_risk"), (79.99, "behind"), (0, "behind")],
)
def test_achievement_band(percentage, band) -> None:
    assert pipeline.achievement_band(percentage) == band
