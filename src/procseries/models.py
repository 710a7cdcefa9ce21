"""Data models for procseries."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Cumulative CPU ticks of one process at one sampling tick."""

    name: str
    pid: int
    cpu_ticks: int  # user + system, in clock ticks since process start


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Immutable capture of every visible process at one instant."""

    timestamp: datetime
    samples: tuple[ProcessSample, ...] = ()


@dataclass(slots=True, frozen=True)
class RawSnapshot:
    """Stored form of a snapshot: line-encoded samples plus the tick rate used."""

    timestamp: datetime
    ticks_per_second: int
    data: str = ""


@dataclass(slots=True, frozen=True)
class UtilizationSample:
    """CPU utilization over the interval ending at relative_time."""

    relative_time: timedelta
    cpu_percent: float


@dataclass(slots=True)
class ProcessUtilization:
    """Derived series for one process name."""

    name: str
    total_cpu_consumed: int = 0
    series: list[UtilizationSample] = field(default_factory=list)


@dataclass(slots=True)
class RankedResult:
    """Top processes by CPU consumed over the derivation window."""

    window: timedelta
    processes: list[ProcessUtilization] = field(default_factory=list)
