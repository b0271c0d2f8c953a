import pandas as pd
import pytest

import salesboard.aggregation as aggregation
from salesboard.io import normalize_records


def _records() -> pd.DataFrame:
    return normalize_records(
        [
            {"year": 2024, "month": 2, "business_unit_id": "B", "target": 50, "actual": 40},
            {"year": 2024, "month": 1, "business_unit_id": "A", "target": 100, "actual": 90},
            {"year": 2024, "month": 1, "business_unit_id": "B", "target": 30, "actual": 45},
            {"year": 2024, "month": 2, "business_unit_id": "A", "target": 0, "actual": 10},
            {"year": 2023, "month": 12, "business_unit_id": "A", "target": 3, "actual": 1},
        ]
    )


def _check_derived_fields(rows: pd.DataFrame) -> None:
    for row in rows.itertuples(index=False):
        assert row.difference == pytest.approx(row.actual - row.target)
        expected = (
            aggregation.round_half_up(row.actual / row.target * 100, 2)
            if row.target > 0
            else 0
        )
        assert row.percentage == pytest.approx(expected)


def test_aggregate_all_units_summed() -> None:
    """One row per period, business units summed and tagged 'all'."""
    out = aggregation.sort_by_period(aggregation.aggregate(_records()))

    assert out["period_key"].tolist() == [202312, 202401, 202402]
    assert set(out["business_unit_id"]) == {"all"}
    jan = out.loc[out["period_key"] == 202401].iloc[0]
    assert jan["target"] == 130
    assert jan["actual"] == 135
    assert jan["record_count"] == 2
    assert jan["percentage"] == pytest.approx(103.85)
    _check_derived_fields(out)


def test_aggregate_per_business_unit() -> None:
    out = aggregation.sort_by_period(
        aggregation.aggregate(_records(), mode=aggregation.AggregationMode.PER_BUSINESS_UNIT)
    )

    assert list(zip(out["period_key"], out["business_unit_id"])) == [
        (202312, "A"),
        (202401, "A"),
        (202401, "B"),
        (202402, "A"),
        (202402, "B"),
    ]
    _check_derived_fields(out)


def test_aggregate_accepts_mode_value_strings() -> None:
    out = aggregation.aggregate(_records(), mode="per_business_unit")

    assert len(out) == 5


def test_zero_target_yields_zero_percentage() -> None:
    """target=0, actual=50 gives percentage 0 and difference 50."""
    records = normalize_records(
        [{"year": 2024, "month": 5, "business_unit_id": 1, "target": 0, "actual": 50}]
    )

    out = aggregation.aggregate(records)

    assert out.loc[0, "percentage"] == 0
    assert out.loc[0, "difference"] == 50


def test_aggregate_empty_input() -> None:
    """An empty input gives an empty frame with the documented columns."""
    out = aggregation.aggregate(normalize_records([]))

    assert out.empty
    assert list(out.columns) == aggregation.AGGREGATE_COLUMNS


def test_aggregate_sums_amount_when_present() -> None:
    records = normalize_records(
        [
            {"year": 2024, "month": 1, "business_unit_id": 1, "amount": 1500},
            {"year": 2024, "month": 1, "business_unit_id": 2, "amount": 500},
        ]
    )

    out = aggregation.aggregate(records)

    assert out.loc[0, "amount"] == 2000
    assert out.loc[0, "target"] == 0


def test_aggregate_does_not_modify_input() -> None:
    records = _records()
    before = records.copy()

    aggregation.aggregate(records)

    pd.testing.assert_frame_equal(records, before)


def test_round_half_up() -> None:
    assert aggregation.round_half_up(2.5) == 3
    assert aggregation.round_half_up(104.995, 2) == pytest.approx(105.0)
    assert aggregation.round_half_up(-2.5) == -3
    assert aggregation.round_half_up(12.345, 1) == pytest.approx(12.3)


def test_achievement_percentage() -> None:
    assert aggregation.achievement_percentage(90, 100) == 90.0
    assert aggregation.achievement_percentage(2, 3) == pytest.approx(66.67)
    assert aggregation.achievement_percentage(10, 0) == 0.0
    assert aggregation.achievement_percentage(10, -5) == 0.0


def test_sort_by_period_is_stable_with_mixed_unit_ids() -> None:
    rows = pd.DataFrame(
        {
            "year": [2024, 2024, 2023],
            "month": [1, 1, 12],
            "business_unit_id": [2, "10", 1],
            "target": [1.0, 2.0, 3.0],
            "actual": [1.0, 2.0, 3.0],
        }
    )

    out = aggregation.sort_by_period(rows)

    assert out["period_key"].tolist() == [202312, 202401, 202401]
    assert out["business_unit_id"].tolist() == [1, "10", 2]


def test_aggregate_per_business_unit_keeps_rows_without_unit() -> None:
    """Rows without a unit id are grouped, never dropped from the sums."""
    rows = pd.DataFrame(
        {
            "year": [2024, 2024],
            "month": [1, 1],
            "business_unit_id": [1, None],
            "target": [100.0, 50.0],
            "actual": [90.0, 50.0],
        }
    )

    out = aggregation.aggregate(rows, mode=aggregation.AggregationMode.PER_BUSINESS_UNIT)

    assert len(out) == 2
    assert out["target"].sum() == 150
    assert out["record_count"].sum() == 2
