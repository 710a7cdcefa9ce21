"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from conftest import make_snapshot

from procseries.cli import main
from procseries.codec import dumps_raw, loads_raw, raw_from_snapshot


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """A config file that keeps `top` fast."""
    path = tmp_path / "config.toml"
    path.write_text("[sampling]\ninterval = 0.1\ncount = 2\n")
    return path


@pytest.fixture
def raw_file(tmp_path: Path) -> Path:
    """A JSON-lines file with two raw snapshots."""
    path = tmp_path / "raw.jsonl"
    lines = [
        dumps_raw(raw_from_snapshot(make_snapshot(0, ("a", 1, 200)), 100)),
        dumps_raw(raw_from_snapshot(make_snapshot(2, ("a", 1, 400)), 100)),
    ]
    path.write_text("\n".join(lines) + "\n")
    return path


class TestSampleCommand:
    """Tests for the sample command."""

    def test_sample_to_stdout(self, runner: CliRunner, config_path: Path) -> None:
        """sample prints one raw snapshot JSON line."""
        result = runner.invoke(main, ["--config", str(config_path), "sample"])

        assert result.exit_code == 0, result.output
        raw = loads_raw(result.stdout.strip())
        assert raw.ticks_per_second > 0
        assert raw.data

    def test_sample_appends_to_file(
        self, runner: CliRunner, config_path: Path, tmp_path: Path
    ) -> None:
        """sample -o appends a line per invocation."""
        output = tmp_path / "out.jsonl"
        for _ in range(2):
            result = runner.invoke(
                main, ["--config", str(config_path), "sample", "-o", str(output)]
            )
            assert result.exit_code == 0, result.output

        lines = output.read_text().splitlines()
        assert len(lines) == 2
        for line in lines:
            loads_raw(line)


class TestDeriveCommand:
    """Tests for the derive command."""

    def test_derive(self, runner: CliRunner, config_path: Path, raw_file: Path) -> None:
        """derive prints the values document."""
        result = runner.invoke(main, ["--config", str(config_path), "derive", str(raw_file)])

        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["end_entries"][0]["name"] == "a"
        assert document["end_entries"][0]["entries"][0]["cpu_time"] == 100.0

    def test_derive_empty_file(
        self, runner: CliRunner, config_path: Path, tmp_path: Path
    ) -> None:
        """An empty file is a clean error, not a traceback."""
        empty = tmp_path / "empty.jsonl"
        empty.write_text("")
        result = runner.invoke(main, ["--config", str(config_path), "derive", str(empty)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_derive_malformed_record(
        self, runner: CliRunner, config_path: Path, tmp_path: Path
    ) -> None:
        """A malformed record fails the command."""
        bad = tmp_path / "bad.jsonl"
        record = {"time": "2024-01-01T00:00:00+00:00", "ticks_per_second": 100, "data": "x;y;z\n"}
        bad.write_text(json.dumps(record) + "\n")
        result = runner.invoke(main, ["--config", str(config_path), "derive", str(bad)])

        assert result.exit_code == 1
        assert "pid is not an integer" in result.output


    def test_derive_mixed_timezones(
        self, runner: CliRunner, config_path: Path, tmp_path: Path
    ) -> None:
        """Naive timestamps are read as UTC next to offset-aware ones."""
        mixed = tmp_path / "mixed.jsonl"
        records = [
            {"time": "2024-01-01T00:00:00+00:00", "ticks_per_second": 100, "data": "a;1;200\n"},
            {"time": "2024-01-01T00:00:02", "ticks_per_second": 100, "data": "a;1;400\n"},
        ]
        mixed.write_text("".join(json.dumps(r) + "\n" for r in records))
        result = runner.invoke(main, ["--config", str(config_path), "derive", str(mixed)])

        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["collection_time"] == {"TimeDiff": 2.0}
        assert document["end_entries"][0]["entries"][0]["cpu_time"] == 100.0


class TestTopCommand:
    """Tests for the top command."""

    def test_top(self, runner: CliRunner, config_path: Path) -> None:
        """top samples the configured number of times and prints values."""
        result = runner.invoke(main, ["--config", str(config_path), "top"])

        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["collection_time"]["TimeDiff"] > 0
        assert 0 < len(document["end_entries"]) <= 16

    def test_top_options_override_config(self, runner: CliRunner, config_path: Path) -> None:
        """--count 1 gives a single snapshot and the one second floor."""
        result = runner.invoke(main, ["--config", str(config_path), "top", "-n", "1"])

        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["collection_time"] == {"TimeDiff": 1.0}
        for entry in document["end_entries"]:
            assert entry["entries"] == []


def test_calls(runner: CliRunner, config_path: Path) -> None:
    """calls lists the served operations."""
    result = runner.invoke(main, ["--config", str(config_path), "calls"])
    assert result.exit_code == 0
    assert result.output.split() == ["values"]


def test_invalid_config(runner: CliRunner, tmp_path: Path) -> None:
    """A bad config file is reported without a traceback."""
    path = tmp_path / "config.toml"
    path.write_text("[sampling]\ncount = 0\n")
    result = runner.invoke(main, ["--config", str(path), "calls"])

    assert result.exit_code == 1
    assert "count" in result.output
