from types import SimpleNamespace

import pytest

import salesboard.cli as cli
from salesboard.config import FilterDefaults
from salesboard.filters import DateRange

CSV = (
    "year,month,bu_id,target,actual\n"
    "2024,1,1,100,90\n"
    "2024,2,1,100,120\n"
    "2024,2,2,50,25\n"
)


def _records_file(tmp_path):
    path = tmp_path / "records.csv"
    path.write_text(CSV, encoding="utf-8")
    return path


def _args(**overrides) -> SimpleNamespace:
    values = {
        "business_unit": None,
        "year": None,
        "specific_month": None,
        "from_period": None,
        "to_period": None,
        "date_range": None,
        "lookback": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_version(capsys) -> None:
    cli.main(["--version"])

    assert "salesboard version" in capsys.readouterr().out


def test_table_output(tmp_path, monkeypatch, capsys) -> None:
    """Prints the series table and the summary line."""
    monkeypatch.chdir(tmp_path)
    path = _records_file(tmp_path)

    cli.main(["--records", str(path), "--cumulative"])

    out = capsys.readouterr().out
    assert "Records read from" in out
    assert "Applied selection: All time" in out
    assert "Jan 2024" in out
    assert "Feb 2024" in out
    assert "cumulative_percentage" in out
    assert "trend: up" in out


def test_csv_output(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    path = _records_file(tmp_path)
    output_dir = tmp_path / "out"

    cli.main(
        [
            "--records",
            str(path),
            "--display-mode",
            "csv",
            "--mode",
            "per_business_unit",
            "--output",
            str(output_dir),
        ]
    )

    files = list(output_dir.glob("series_*.csv"))
    assert len(files) == 1
    lines = files[0].read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("period,period_key,year,month")
    assert len(lines) == 4
    assert "Wrote" in capsys.readouterr().out


def test_no_data_message(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    path = _records_file(tmp_path)

    cli.main(["--records", str(path), "--month", "2025-01"])

    assert "No data available" in capsys.readouterr().out


def test_config_file_supplies_records_and_defaults(tmp_path, monkeypatch, capsys) -> None:
    """salesboard_config.toml in the working directory is picked up."""
    _records_file(tmp_path)
    (tmp_path / "salesboard_config.toml").write_text(
        '[data]\nrecords_file = "records.csv"\n\n[filters]\nbusiness_unit = "2"\n',
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    cli.main([])

    out = capsys.readouterr().out
    assert "Feb 2024" in out
    assert "Jan 2024" not in out


def test_missing_records_file_is_a_usage_error(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit):
        cli.main([])

    with pytest.raises(SystemExit):
        cli.main(["--records", str(tmp_path / "missing.csv")])


def test_bad_period_is_a_usage_error(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    path = _records_file(tmp_path)

    with pytest.raises(SystemExit):
        cli.main(["--records", str(path), "--from", "2024/01"])


def test_build_selection_precedence() -> None:
    """--month wins over --from/--to, which win over --range."""
    defaults = FilterDefaults(date_range=DateRange.LAST_N_MONTHS, lookback_months=12)

    specific = cli.build_selection(
        _args(specific_month="2024-02", from_period="2024-01"), defaults
    )
    custom = cli.build_selection(_args(from_period="2024-01", date_range="all"), defaults)
    relative = cli.build_selection(_args(year="2024", business_unit="7"), defaults)

    assert specific.date_range is DateRange.CUSTOM_SPECIFIC
    assert (specific.specific_year, specific.specific_month) == (2024, 2)
    assert custom.date_range is DateRange.CUSTOM_RANGE
    assert (custom.start_key, custom.end_key) == (202401, None)
    assert relative.date_range is DateRange.LAST_N_MONTHS
    assert relative.lookback_months == 12
    assert relative.year == 2024
    assert relative.business_unit_id == "7"
