"""Exception hierarchy for procseries."""


class ProcseriesError(Exception):
    """Base class for all procseries errors."""


class CollectionError(ProcseriesError):
    """A sampling tick produced no data."""


class EnumerationFailed(CollectionError):
    """The process table itself could not be read."""


class SamplerNotPrepared(CollectionError):
    """collect() was called before prepare()."""


class ProcessVanished(ProcseriesError):
    """A single process exited or became unreadable while being sampled.

    Raised inside the sampler only; collect() skips the process.
    """

    def __init__(self, pid: int) -> None:
        super().__init__(f"process {pid} vanished")
        self.pid = pid


class ParseError(ProcseriesError):
    """Raw data could not be decoded."""


class MalformedRecord(ParseError):
    """A `name;pid;cpu_ticks` record is invalid. The whole snapshot is rejected."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        super().__init__(f"line {line_number}: {reason}: {line!r}")
        self.line_number = line_number
        self.line = line
        self.reason = reason


class DerivationError(ProcseriesError):
    """A derivation request failed."""


class NoData(DerivationError):
    """No snapshots were supplied."""


class Overflow(DerivationError):
    """A tick counter exceeded the unsigned 64-bit range."""


class QueryError(ProcseriesError):
    """A query against the processes view was rejected."""


class UnsupportedApi(QueryError):
    """The requested operation is not served by this view."""


class TickRateConflict(ProcseriesError):
    """The tick rate was already set to a different value."""


class TickRateUnset(ProcseriesError, RuntimeError):
    """The tick rate was read before anything set it."""
