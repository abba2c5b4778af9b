"""Tests for the fitprep-process command line."""

import pandas as pd
import pytest

from conftest import SPIKY_DISTANCES, build_activity
from fitprep.catalog import decode_records
from fitprep.processing import main_with_args, parse_arguments


@pytest.fixture
def fit_path(tmp_path, activity_bytes):
    path = tmp_path / "morning_run.fit"
    path.write_bytes(activity_bytes)
    return path


def test_parse_arguments_defaults():
    args = parse_arguments(["a.fit", "b.fit"])

    assert args.fit_files == ["a.fit", "b.fit"]
    assert not args.remove_speed
    assert not args.smooth_speed
    assert args.window == 5
    assert args.output_dir == "data"
    assert args.tz == "Europe/Helsinki"
    assert not args.dump_records
    assert not args.inspect


def test_process_writes_outputs(tmp_path, fit_path, capsys):
    """Test that the processed file and the summary CSV are written."""
    out_dir = tmp_path / "out"
    args = parse_arguments(
        [str(fit_path), "--remove-speed", "--smooth-speed", "--output-dir", str(out_dir)]
    )

    assert main_with_args(args) == 0

    processed = out_dir / "morning_run_processed.fit"
    assert processed.exists()
    records = decode_records(processed.read_bytes())
    assert all(r.get("speed") is None for r in records)

    summary = pd.read_csv(out_dir / "workout_summary.csv")
    assert summary["file"].tolist() == ["morning_run.fit"]
    assert summary["sport"].tolist() == ["running"]
    assert summary["distance_km"].tolist() == pytest.approx([0.03])

    output = capsys.readouterr().out
    assert "Workout Type: running" in output
    assert "Workout Distance: 30 m" in output


def test_dump_records(tmp_path, fit_path):
    args = parse_arguments([str(fit_path), "--dump-records", "--output-dir", str(tmp_path)])

    assert main_with_args(args) == 0

    frame = pd.read_csv(tmp_path / "morning_run_records.csv")
    distances = frame[(frame["message"] == "record") & (frame["field"] == "distance")]
    assert distances["value"].astype(float).tolist() == pytest.approx(SPIKY_DISTANCES)


def test_multiple_files(tmp_path):
    paths = []
    for name, distances in (("a.fit", [0.0, 5.0]), ("b.fit", [0.0, 10.0, 20.0])):
        path = tmp_path / name
        path.write_bytes(build_activity(distances))
        paths.append(str(path))

    args = parse_arguments(paths + ["--output-dir", str(tmp_path / "out")])
    assert main_with_args(args) == 0

    summary = pd.read_csv(tmp_path / "out" / "workout_summary.csv")
    assert sorted(summary["file"]) == ["a.fit", "b.fit"]


def test_missing_file_fails(tmp_path, fit_path, capsys):
    """Test that a missing input is reported and the exit code is 1."""
    args = parse_arguments(
        [str(tmp_path / "nope.fit"), str(fit_path), "--output-dir", str(tmp_path)]
    )

    assert main_with_args(args) == 1
    assert "FIT file not found" in capsys.readouterr().out
    assert (tmp_path / "morning_run_processed.fit").exists()


def test_corrupt_file_fails(tmp_path, activity_bytes, capsys):
    path = tmp_path / "bad.fit"
    path.write_bytes(activity_bytes[:-1] + bytes([activity_bytes[-1] ^ 0xFF]))

    args = parse_arguments([str(path), "--output-dir", str(tmp_path)])

    assert main_with_args(args) == 1
    output = capsys.readouterr().out
    assert "CRC" in output
    assert "No data to output." in output


def test_negative_window_rejected(fit_path, capsys):
    args = parse_arguments([str(fit_path), "--smooth-speed", "--window", "-1"])

    assert main_with_args(args) == 1
    assert "window" in capsys.readouterr().out


def test_unknown_time_zone_rejected(tmp_path, fit_path, capsys):
    """Test that an unknown --tz name fails before any file is processed."""
    args = parse_arguments(
        [str(fit_path), "--tz", "Mars/Olympus_Mons", "--output-dir", str(tmp_path / "out")]
    )

    assert main_with_args(args) == 1
    assert "unknown time zone: Mars/Olympus_Mons" in capsys.readouterr().out
    assert not (tmp_path / "out").exists()


def test_inspect_prints_definitions(tmp_path, fit_path, capsys):
    """Test that --inspect lists definitions and writes nothing."""
    out_dir = tmp_path / "out"
    args = parse_arguments([str(fit_path), "--inspect", "--output-dir", str(out_dir)])

    assert main_with_args(args) == 0

    output = capsys.readouterr().out
    assert "morning_run.fit: 10 data messages" in output
    assert "local  0 -> file_id (global 0), 3 fields, 7 bytes, little-endian" in output
    assert "local  1 -> record (global 20), 5 fields, 15 bytes, little-endian" in output
    assert "local  2 -> session (global 18), 2 fields, 5 bytes, little-endian" in output
    assert not out_dir.exists()


def test_inspect_reports_bad_file(tmp_path, capsys):
    path = tmp_path / "short.fit"
    path.write_bytes(b"\x0e\x10")

    args = parse_arguments([str(path), "--inspect"])

    assert main_with_args(args) == 1
    assert "Invalid FIT file" in capsys.readouterr().out
