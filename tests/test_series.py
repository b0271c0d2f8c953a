import pandas as pd
import pytest

import salesboard.series as series
from salesboard.aggregation import aggregate, sort_by_period
from salesboard.cumulative import cumulate
from salesboard.formatting import IDR
from salesboard.io import normalize_records
from salesboard.periods import InvalidMonthError


def _rows() -> pd.DataFrame:
    records = normalize_records(
        [
            {"year": 2024, "month": 1, "business_unit_id": 1, "target": 100, "actual": 90},
            {"year": 2024, "month": 2, "business_unit_id": 1, "target": 2_000_000, "actual": 2_500_000},
        ]
    )
    return sort_by_period(aggregate(records))


def test_build_series_labels_and_values() -> None:
    """Labels are added and value fields are copied unchanged."""
    rows = _rows()

    result = series.build_series(rows)

    assert result.has_data
    assert result.message == ""
    assert result.periods == ["Jan 2024", "Feb 2024"]
    assert result.data["axis_label"].tolist() == ["Jan'24", "Feb'24"]
    assert result.data["month_name"].tolist() == ["Jan", "Feb"]
    assert result.data["business_unit_id"].tolist() == ["all", "all"]
    assert result.data["target"].tolist() == rows["target"].tolist()
    assert result.data["percentage"].tolist() == rows["percentage"].tolist()
    assert result.data["actual_display"].tolist() == ["90", "2.5M"]
    assert result.meta["number_format"] == "compact"


def test_build_series_column_order() -> None:
    result = series.build_series(cumulate(_rows()))
    columns = list(result.data.columns)

    assert columns[: len(series.LABEL_COLUMNS)] == series.LABEL_COLUMNS
    assert columns.index("cumulative_percentage") < columns.index("target_display")
    assert "cumulative_actual_display" in columns


def test_build_series_with_other_formatter() -> None:
    result = series.build_series(_rows(), formatter=IDR)

    assert result.data["target_display"].tolist() == ["Rp 100", "Rp 2.0 Juta"]
    assert result.meta["number_format"] == "idr"


def test_build_series_empty_rows() -> None:
    """No rows: an empty series with a no-data message, not an error."""
    empty = sort_by_period(aggregate(normalize_records([])))

    result = series.build_series(empty)

    assert not result.has_data
    assert result.message == series.NO_DATA_MESSAGE
    assert result.periods == []
    assert result.to_records() == []


def test_build_series_adds_missing_key_and_unit() -> None:
    rows = pd.DataFrame({"year": [2024], "month": [3], "target": [1.0], "actual": [1.0]})

    result = series.build_series(rows)

    assert result.data.loc[0, "period_key"] == 202403
    assert result.data.loc[0, "business_unit_id"] == "all"


def test_build_series_invalid_month() -> None:
    rows = pd.DataFrame({"year": [2024], "month": [0], "target": [1.0], "actual": [1.0]})

    with pytest.raises(InvalidMonthError):
        series.build_series(rows)


def test_to_records() -> None:
    records = series.build_series(_rows()).to_records()

    assert records[0]["period"] == "Jan 2024"
    assert records[1]["actual"] == 2_500_000


def test_labels() -> None:
    assert series.period_label(2024, 11) == "Nov 2024"
    assert series.axis_label(2030, 5) == "May'30"
