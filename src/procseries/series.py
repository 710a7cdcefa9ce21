"""Derivation of ranked per-process CPU utilization series from snapshots.

Processes are identified by name. Every pid sharing a name feeds one series,
so a short-lived worker that is restarted keeps a single line, and unrelated
processes that happen to share a name are merged as well.
"""

import json
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

import structlog

from procseries.errors import NoData, Overflow
from procseries.models import ProcessUtilization, RankedResult, Snapshot, UtilizationSample

log = structlog.get_logger()

MAX_TICKS = 2**64 - 1
MIN_WINDOW = timedelta(seconds=1)

# Ranked lists longer than TRUNCATE_ABOVE keep only the first KEEP_TOP entries.
TRUNCATE_ABOVE = 16
KEEP_TOP = 15

Timeline = dict[timedelta, int]


class SeriesBuilder:
    """Converts cumulative tick snapshots into utilization percentages."""

    def __init__(self, ticks_per_second: int) -> None:
        if ticks_per_second <= 0:
            raise ValueError(f"ticks per second must be positive, got {ticks_per_second}")
        self._ticks_per_second = ticks_per_second

    @property
    def ticks_per_second(self) -> int:
        return self._ticks_per_second

    def derive(self, snapshots: Sequence[Snapshot]) -> RankedResult:
        """
        Build the ranked result for snapshots given in timestamp order.

        Raises:
            NoData: snapshots is empty.
            Overflow: A tick sum left the unsigned 64-bit range.
        """
        if not snapshots:
            raise NoData("no snapshots to derive from")

        window = snapshots[-1].timestamp - snapshots[0].timestamp
        if window <= timedelta(0):
            window = MIN_WINDOW

        timelines = build_timelines(snapshots)
        processes = [self._utilization(name, timeline) for name, timeline in timelines.items()]

        # Stable: ties keep first-seen order
        processes.sort(key=lambda p: p.total_cpu_consumed, reverse=True)
        if len(processes) > TRUNCATE_ABOVE:
            processes = processes[:KEEP_TOP]

        log.debug(
            "series_derived",
            snapshots=len(snapshots),
            names=len(timelines),
            kept=len(processes),
            window=window.total_seconds(),
        )
        return RankedResult(window=window, processes=processes)

    def _utilization(self, name: str, timeline: Timeline) -> ProcessUtilization:
        entries = sorted(timeline.items())
        result = ProcessUtilization(name=name)

        # The first entry is the baseline and never becomes a sample
        prev_time, prev_ticks = entries[0]
        for time, ticks in entries[1:]:
            # Counter went backwards: reset or a reused name
            delta_ticks = max(ticks - prev_ticks, 0)
            result.total_cpu_consumed += delta_ticks
            if result.total_cpu_consumed > MAX_TICKS:
                raise Overflow(f"total CPU ticks of {name!r} overflowed")

            delta_time = time - prev_time
            # Unreachable while offsets are unique timeline keys; kept as a guard
            if not delta_time:
                continue

            cpu_percent = delta_ticks * 100 / (self._ticks_per_second * delta_time.total_seconds())
            result.series.append(UtilizationSample(relative_time=time, cpu_percent=cpu_percent))
            prev_time, prev_ticks = time, ticks

        return result


def build_timelines(snapshots: Sequence[Snapshot]) -> dict[str, Timeline]:
    """
    Group samples by process name and offset from the first snapshot.

    Samples for the same name at the same offset (several pids, one name)
    are summed.
    """
    time_zero = snapshots[0].timestamp
    timelines: dict[str, Timeline] = {}
    for snapshot in snapshots:
        offset = snapshot.timestamp - time_zero
        for sample in snapshot.samples:
            timeline = timelines.setdefault(sample.name, {})
            ticks = timeline.get(offset, 0) + sample.cpu_ticks
            if ticks > MAX_TICKS:
                raise Overflow(f"CPU ticks of {sample.name!r} overflowed at {offset}")
            timeline[offset] = ticks
    return timelines


def _duration(value: timedelta) -> dict[str, float]:
    return {"TimeDiff": value.total_seconds()}


def result_to_dict(result: RankedResult) -> dict[str, Any]:
    """Shape a ranked result the way the visualization layer reads it."""
    return {
        "collection_time": _duration(result.window),
        "end_entries": [
            {
                "name": process.name,
                "total_cpu_time": process.total_cpu_consumed,
                "entries": [
                    {"cpu_time": sample.cpu_percent, "time": _duration(sample.relative_time)}
                    for sample in process.series
                ],
            }
            for process in result.processes
        ],
    }


def result_to_json(result: RankedResult) -> str:
    return json.dumps(result_to_dict(result))
