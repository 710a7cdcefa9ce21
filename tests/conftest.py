"""Shared test fixtures for procseries."""

from datetime import datetime, timedelta, timezone

from procseries.models import ProcessSample, Snapshot

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_snapshot(seconds: float, *samples: tuple[str, int, int]) -> Snapshot:
    """Create a Snapshot `seconds` after T0 from (name, pid, cpu_ticks) tuples."""
    return Snapshot(
        timestamp=T0 + timedelta(seconds=seconds),
        samples=tuple(ProcessSample(name=n, pid=p, cpu_ticks=t) for n, p, t in samples),
    )
