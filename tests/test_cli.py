"""Tests for CLI module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from scheduler.cli import app
from scheduler.data.loader import load_school_data
from scheduler.data.models import SessionLabel


runner = CliRunner()


@pytest.fixture
def school_data() -> dict:
    """Two classes sharing Math with T1, stored with legacy string labels."""
    return {
        "setup": {"days": ["Mon", "Tue"], "periods_per_day": 2},
        "allocations": [
            {"class_name": "A", "subjects": [{"subject": "Math", "teacher": "T1", "periods": 2}]},
            {"class_name": "B", "subjects": [{"subject": "Math", "teacher": "T1", "periods": 1}]},
        ],
        "grid": {
            "A": {"Mon": ["", ""], "Tue": ["", ""]},
            "B": {"Mon": ["", ""], "Tue": ["", ""]},
        },
    }


@pytest.fixture
def data_file(school_data, tmp_path) -> Path:
    """Create a temporary data file."""
    filepath = tmp_path / "school_data.json"
    with open(filepath, "w") as f:
        json.dump(school_data, f)
    return filepath


def invoke(data_file: Path, *args: str):
    return runner.invoke(app, ["--data", str(data_file), *args])


class TestInitCommand:
    """Tests for the init command."""

    def test_init_setup_only(self, tmp_path):
        """init writes a setup with no allocations."""
        path = tmp_path / "new.json"
        result = invoke(path, "init", "--days", "Mon,Tue,Wed", "--periods", "4")

        assert result.exit_code == 0
        data = load_school_data(path).data
        assert data.setup.days == ["Mon", "Tue", "Wed"]
        assert data.setup.periods_per_day == 4
        assert data.allocations == []

    def test_init_sample(self, tmp_path):
        """init --sample writes generated allocations and an empty grid."""
        path = tmp_path / "sample.json"
        result = invoke(path, "init", "--sample", "--grades", "2", "--seed", "3")

        assert result.exit_code == 0
        assert "Generated" in result.stdout
        data = load_school_data(path).data
        assert len(data.allocations) == 4
        assert set(data.grid) == set(data.class_names)

    def test_init_refuses_to_overwrite(self, data_file):
        """init without --force keeps an existing file."""
        result = invoke(data_file, "init")

        assert result.exit_code == 1
        assert "already exists" in result.stdout
        assert load_school_data(data_file).data.class_names == ["A", "B"]


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_file(self, data_file):
        result = invoke(data_file, "validate")

        assert result.exit_code == 0
        assert "Valid" in result.stdout

    def test_malformed_cell_reported(self, data_file, school_data):
        school_data["grid"]["A"]["Mon"][0] = "Math T1"
        data_file.write_text(json.dumps(school_data))

        result = invoke(data_file, "validate")

        assert result.exit_code == 0
        assert "Skipped malformed cell" in result.stdout

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")

        result = invoke(path, "validate")

        assert result.exit_code == 1
        assert "Error loading data" in result.stdout

    def test_invalid_structure(self, data_file, school_data):
        school_data["setup"]["periods_per_day"] = 0
        data_file.write_text(json.dumps(school_data))

        result = invoke(data_file, "validate")

        assert result.exit_code == 1
        assert "Invalid data" in result.stdout


class TestAutofillCommand:
    """Tests for the autofill command."""

    def test_autofill_writes_grid(self, data_file):
        result = invoke(data_file, "autofill", "--seed", "1")

        assert result.exit_code == 0
        assert "Auto-filled successfully" in result.stdout
        grid = load_school_data(data_file).data.grid
        math = SessionLabel(subject="Math", teacher="T1")
        assert sum(cell == math for cells in grid["A"].values() for cell in cells) == 2
        assert sum(cell == math for cells in grid["B"].values() for cell in cells) == 1

    def test_autofill_when_full(self, data_file):
        invoke(data_file, "autofill", "--seed", "1")
        result = invoke(data_file, "autofill")

        assert result.exit_code == 0
        assert "already full" in result.stdout

    def test_autofill_exhausted(self, data_file, school_data):
        school_data["allocations"][0]["subjects"][0]["periods"] = 5
        data_file.write_text(json.dumps(school_data))
        before = data_file.read_text()

        result = invoke(data_file, "autofill", "--attempts", "3")

        assert result.exit_code == 1
        assert data_file.read_text() == before

    def test_autofill_not_configured(self, tmp_path):
        result = invoke(tmp_path / "missing.json", "autofill")

        assert result.exit_code == 1
        assert "not configured" in result.stdout

    def test_attempts_from_env(self, data_file, school_data, monkeypatch):
        monkeypatch.setenv("SCHEDULER_MAX_ATTEMPTS", "2")
        school_data["allocations"][0]["subjects"][0]["periods"] = 5
        data_file.write_text(json.dumps(school_data))

        result = invoke(data_file, "autofill")

        assert result.exit_code == 1
        assert "2 attempts" in result.stdout


class TestCheckCommand:
    """Tests for the check command."""

    def test_clean_grid(self, data_file):
        result = invoke(data_file, "check")

        assert result.exit_code == 0
        assert "No collisions found" in result.stdout

    def test_collision(self, data_file, school_data):
        school_data["grid"]["A"]["Mon"][0] = "Math (T1)"
        school_data["grid"]["B"]["Mon"][0] = "Science (T1)"
        data_file.write_text(json.dumps(school_data))

        result = invoke(data_file, "check")

        assert result.exit_code == 1
        assert "Collisions" in result.stdout


class TestViewCommands:
    """Tests for view and progress."""

    def test_overview(self, data_file):
        result = invoke(data_file, "view")

        assert result.exit_code == 0
        assert "Teacher Load" in result.stdout

    def test_class_view(self, data_file):
        result = invoke(data_file, "view", "--class", "A")

        assert result.exit_code == 0
        assert "Class A" in result.stdout

    def test_teacher_view(self, data_file):
        result = invoke(data_file, "view", "--teacher", "T1")

        assert result.exit_code == 0
        assert "Teacher T1" in result.stdout

    def test_unknown_class(self, data_file):
        result = invoke(data_file, "view", "--class", "Z")

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_progress(self, data_file):
        result = invoke(data_file, "progress", "--class", "A")

        assert result.exit_code == 0
        assert "0/2" in result.stdout


class TestSetCommand:
    """Tests for the set command."""

    def test_set_and_clear(self, data_file):
        result = invoke(data_file, "set", "A", "Mon", "1", "--subject", "Math", "--teacher", "T1")
        assert result.exit_code == 0
        assert load_school_data(data_file).data.grid["A"]["Mon"][0] == SessionLabel(subject="Math", teacher="T1")

        result = invoke(data_file, "set", "A", "Mon", "1", "--clear")
        assert result.exit_code == 0
        assert load_school_data(data_file).data.grid["A"]["Mon"][0] is None

    def test_limit_reached(self, data_file):
        invoke(data_file, "set", "B", "Mon", "1", "-s", "Math", "-T", "T1")

        result = invoke(data_file, "set", "B", "Tue", "1", "-s", "Math", "-T", "T1")

        assert result.exit_code == 1
        assert "Limit reached" in result.stdout
        assert load_school_data(data_file).data.grid["B"]["Tue"][0] is None

    def test_missing_label(self, data_file):
        result = invoke(data_file, "set", "A", "Mon", "1")
        assert result.exit_code == 2

    def test_unknown_day(self, data_file):
        result = invoke(data_file, "set", "A", "Sun", "1", "-s", "Math", "-T", "T1")

        assert result.exit_code == 1
        assert "Unknown day" in result.stdout


class TestResetAndExport:
    """Tests for reset and export."""

    def test_reset(self, data_file):
        invoke(data_file, "autofill", "--seed", "2")

        result = invoke(data_file, "reset", "--yes")

        assert result.exit_code == 0
        grid = load_school_data(data_file).data.grid
        assert all(cell is None for days in grid.values() for cells in days.values() for cell in cells)

    def test_reset_needs_confirmation(self, data_file):
        invoke(data_file, "autofill", "--seed", "2")

        result = runner.invoke(app, ["--data", str(data_file), "reset"], input="n\n")

        assert result.exit_code == 1
        grid = load_school_data(data_file).data.grid
        assert any(cell is not None for days in grid.values() for cells in days.values() for cell in cells)

    def test_export_json(self, data_file, tmp_path):
        output = tmp_path / "out.json"
        result = invoke(data_file, "export", str(output))

        assert result.exit_code == 0
        saved = json.loads(output.read_text())
        assert saved["setup"]["periods_per_day"] == 2

    def test_export_csv(self, data_file, tmp_path):
        invoke(data_file, "autofill", "--seed", "2")
        output = tmp_path / "out.csv"

        result = invoke(data_file, "export", str(output), "--format", "csv")

        assert result.exit_code == 0
        lines = output.read_text().splitlines()
        assert lines[0] == "class,day,period,subject,teacher"
        assert len(lines) == 4

    def test_export_unknown_format(self, data_file, tmp_path):
        result = invoke(data_file, "export", str(tmp_path / "out.xml"), "--format", "xml")
        assert result.exit_code == 2


class TestCommandErrors:
    """Bad configuration and unwritable targets end with a message, not a traceback."""

    def test_bad_attempts_env(self, data_file, monkeypatch):
        monkeypatch.setenv("SCHEDULER_MAX_ATTEMPTS", "abc")

        result = invoke(data_file, "autofill")

        assert result.exit_code == 1
        assert "Invalid engine configuration" in result.stdout
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_export_unwritable(self, data_file, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        result = invoke(data_file, "export", str(blocker / "out.json"))

        assert result.exit_code == 1
        assert "could not write" in result.stdout
        assert isinstance(result.exception, SystemExit)
