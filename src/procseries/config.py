"""Configuration system for procseries."""

from dataclasses import dataclass, field, fields
from pathlib import Path

import tomlkit

_LOG_LEVELS = {"debug", "info", "warning", "error"}


@dataclass
class SamplingConfig:
    """Sampling configuration for the `top` command."""

    interval: float = 1.0  # Seconds between snapshots
    count: int = 5  # Snapshots per derivation


@dataclass
class LoggingConfig:
    """Log output configuration."""

    level: str = "warning"
    json: bool = False  # JSON lines instead of console rendering


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a flat dataclass instance to a tomlkit Table."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        table.add(f.name, getattr(obj, f.name))
    return table


@dataclass
class Config:
    """Main configuration container."""

    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @staticmethod
    def default_path() -> Path:
        """Path to the user config file."""
        return Path.home() / ".config" / "procseries" / "config.toml"

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.default_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("sampling", "logging"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values."""
        path = path or cls.default_path()
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            sampling=_load_sampling_config(data.get("sampling", {})),
            logging=_load_logging_config(data.get("logging", {})),
        )


def _load_sampling_config(data: dict) -> SamplingConfig:
    """Load sampling config, using dataclass defaults for missing fields."""
    defaults = SamplingConfig()
    interval = float(data.get("interval", defaults.interval))
    count = int(data.get("count", defaults.count))

    if interval <= 0:
        raise ValueError(f"sampling.interval must be > 0, got {interval}")
    if count < 1:
        raise ValueError(f"sampling.count must be >= 1, got {count}")
    return SamplingConfig(interval=interval, count=count)


def _load_logging_config(data: dict) -> LoggingConfig:
    """Load logging config, using dataclass defaults for missing fields."""
    defaults = LoggingConfig()
    level = str(data.get("level", defaults.level)).lower()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Invalid logging.level: {level!r}. Must be one of {sorted(_LOG_LEVELS)}")
    return LoggingConfig(level=level, json=bool(data.get("json", defaults.json)))
