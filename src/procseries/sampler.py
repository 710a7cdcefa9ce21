"""Process CPU-tick sampler for procseries."""

from datetime import datetime, timezone

import psutil
import structlog

from procseries.codec import raw_from_snapshot
from procseries.errors import EnumerationFailed, ProcessVanished, SamplerNotPrepared
from procseries.models import ProcessSample, RawSnapshot, Snapshot
from procseries.tickrate import TickRate

log = structlog.get_logger()


class ProcessSampler:
    """
    Sampler that reads cumulative CPU ticks of every process using psutil.

    prepare() must run once before collect(). Processes that exit or deny
    access while being read are skipped; failure to list processes at all
    raises EnumerationFailed.
    """

    def __init__(self, tick_rate: TickRate | None = None) -> None:
        """
        Initialize the ProcessSampler.

        Args:
            tick_rate: Shared tick-rate cell. The series builder must convert
                with the same cell, so pass it in when both run in one process.
        """
        self._tick_rate = tick_rate if tick_rate is not None else TickRate()
        self._prepared = False

    @property
    def tick_rate(self) -> TickRate:
        """Get the tick-rate cell this sampler records with."""
        return self._tick_rate

    @property
    def is_prepared(self) -> bool:
        """Check if prepare() has run."""
        return self._prepared

    def prepare(self) -> int:
        """Resolve and cache the platform tick rate. Safe to call repeatedly."""
        rate = self._tick_rate.resolve()
        if not self._prepared:
            log.info("tick_rate_resolved", ticks_per_second=rate)
        self._prepared = True
        return rate

    def collect(self) -> Snapshot:
        """
        Capture one snapshot of all visible processes.

        Raises:
            SamplerNotPrepared: prepare() was never called.
            EnumerationFailed: The process table could not be read.
        """
        if not self._prepared:
            raise SamplerNotPrepared("collect() called before prepare()")
        ticks_per_second = self._tick_rate.get()

        timestamp = datetime.now(timezone.utc)
        try:
            processes = list(psutil.process_iter())
        except (OSError, psutil.Error) as e:
            log.error("enumeration_failed", error=str(e))
            raise EnumerationFailed(f"failed to read all processes: {e}") from e

        samples: list[ProcessSample] = []
        for proc in processes:
            try:
                samples.append(self._read_process(proc, ticks_per_second))
            except ProcessVanished as e:
                # Died mid-poll, access denied or zombie: expected, skip it
                log.debug("process_skipped", pid=e.pid)
                continue

        log.debug(
            "snapshot_collected",
            processes=len(samples),
            skipped=len(processes) - len(samples),
        )
        return Snapshot(timestamp=timestamp, samples=tuple(samples))

    def collect_raw(self) -> RawSnapshot:
        """Capture one snapshot in its stored form."""
        snapshot = self.collect()
        return raw_from_snapshot(snapshot, self._tick_rate.get())

    def _read_process(self, proc: psutil.Process, ticks_per_second: int) -> ProcessSample:
        """Read name and user+system ticks of one process."""
        try:
            with proc.oneshot():
                name = proc.name()
                times = proc.cpu_times()
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as e:
            raise ProcessVanished(proc.pid) from e

        # Records are newline-delimited
        name = name.replace("\n", "?")
        cpu_ticks = round((times.user + times.system) * ticks_per_second)
        return ProcessSample(name=name, pid=proc.pid, cpu_ticks=max(cpu_ticks, 0))
