"""Tests for the build_report command-line script."""

import json
from pathlib import Path

import pytest

from scripts.build_report import load_snapshot, main


@pytest.fixture
def snapshot_file(tmp_path: Path, snapshot_data: dict) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_data), encoding="utf-8")
    return path


class TestLoadSnapshot:
    def test_loads_records(self, snapshot_file: Path) -> None:
        snap = load_snapshot(snapshot_file)
        assert len(snap.tasks) == 5
        assert len(snap.assignments) == 1


class TestMain:
    def test_prints_summary(self, snapshot_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(snapshot_file), "--as-of", "2024-06-15"]) == 0
        out = capsys.readouterr().out
        assert "As of 2024-06-15 | All Time | All Teams | All Projects" in out
        assert "completed 2, overdue 1" in out
        assert "Ada Lovelace" in out
        assert "Data Pipeline (low_completion, on_hold)" in out

    def test_writes_pdf_and_json(self, snapshot_file: Path, tmp_path: Path) -> None:
        pdf_path = tmp_path / "report.pdf"
        json_path = tmp_path / "report.json"
        code = main([
            str(snapshot_file), "--as-of", "2024-06-15", "--kind", "weekly",
            "--pdf", str(pdf_path), "--json", str(json_path),
        ])
        assert code == 0
        assert pdf_path.read_bytes().startswith(b"%PDF")
        report = json.loads(json_path.read_text(encoding="utf-8"))
        assert report["totals"]["tasks_total"] == 5

    def test_filters(self, snapshot_file: Path, tmp_path: Path) -> None:
        json_path = tmp_path / "report.json"
        main([
            str(snapshot_file), "--as-of", "2024-06-15", "--time-frame", "week",
            "--team", "T1", "--json", str(json_path),
        ])
        report = json.loads(json_path.read_text(encoding="utf-8"))
        assert report["totals"]["tasks_total"] == 3
        assert report["context"]["window_label"] == "This Week"

    def test_missing_file_exits_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(tmp_path / "missing.json")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_invalid_snapshot_exits_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "bad.json"
        path.write_text('{"tasks": [{"title": "no id"}]}', encoding="utf-8")
        assert main([str(path)]) == 1
        assert "invalid snapshot" in capsys.readouterr().err

    def test_malformed_json_exits_1(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert main([str(path)]) == 1

    def test_bad_time_frame_is_usage_error(self, snapshot_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([str(snapshot_file), "--time-frame", "fortnight"])
        assert exc_info.value.code == 2
