"""Tests for configuration system."""

from pathlib import Path

import pytest

from procseries.config import Config, LoggingConfig, SamplingConfig


def test_sampling_config_defaults():
    """SamplingConfig has correct defaults."""
    config = SamplingConfig()
    assert config.interval == 1.0
    assert config.count == 5


def test_logging_config_defaults():
    """LoggingConfig has correct defaults."""
    config = LoggingConfig()
    assert config.level == "warning"
    assert config.json is False


def test_default_path():
    """Config lives under ~/.config/procseries."""
    assert Config.default_path() == Path.home() / ".config" / "procseries" / "config.toml"


def test_load_missing_file_returns_defaults(tmp_path: Path):
    """A missing file yields the dataclass defaults."""
    assert Config.load(tmp_path / "absent.toml") == Config()


def test_save_and_load_round_trip(tmp_path: Path):
    """Saved values are loaded back."""
    path = tmp_path / "nested" / "config.toml"
    config = Config(
        sampling=SamplingConfig(interval=0.5, count=10),
        logging=LoggingConfig(level="debug", json=True),
    )
    config.save(path)

    assert path.exists()
    assert Config.load(path) == config


def test_partial_file_uses_defaults(tmp_path: Path):
    """Missing keys fall back to defaults."""
    path = tmp_path / "config.toml"
    path.write_text("[sampling]\ncount = 3\n")

    config = Config.load(path)
    assert config.sampling.count == 3
    assert config.sampling.interval == 1.0
    assert config.logging == LoggingConfig()


def test_invalid_toml(tmp_path: Path):
    """Unparsable TOML is reported as ValueError."""
    path = tmp_path / "config.toml"
    path.write_text("[sampling\n")
    with pytest.raises(ValueError, match="Failed to parse"):
        Config.load(path)


@pytest.mark.parametrize(
    "content",
    [
        "[sampling]\ninterval = 0\n",
        "[sampling]\ncount = 0\n",
        '[logging]\nlevel = "verbose"\n',
    ],
)
def test_invalid_values(tmp_path: Path, content: str):
    """Out-of-range values are rejected."""
    path = tmp_path / "config.toml"
    path.write_text(content)
    with pytest.raises(ValueError):
        Config.load(path)
