"""Text encodings for snapshots.

Samples travel as one `name;pid;cpu_ticks` record per line. A whole raw
snapshot (timestamp, tick rate and the encoded records) is stored as a single
JSON object per line.
"""

import json
import re
from collections.abc import Iterable
from datetime import datetime, timezone

from procseries.errors import MalformedRecord, ParseError
from procseries.models import ProcessSample, RawSnapshot, Snapshot

FIELD_SEPARATOR = ";"

_UNSIGNED = re.compile(r"[0-9]+")


def encode_record(sample: ProcessSample) -> str:
    """Encode one sample as a newline-terminated record."""
    return f"{sample.name}{FIELD_SEPARATOR}{sample.pid}{FIELD_SEPARATOR}{sample.cpu_ticks}\n"


def encode_records(samples: Iterable[ProcessSample]) -> str:
    """Encode samples, one record per line."""
    return "".join(encode_record(sample) for sample in samples)


def decode_records(data: str) -> tuple[ProcessSample, ...]:
    """
    Decode records produced by encode_records().

    The name is everything before the last two separators, so names that
    contain the separator survive. Any bad record rejects the whole input.

    Raises:
        MalformedRecord: A record has fewer than three fields or a pid or
            tick field that is not an unsigned integer.
    """
    lines = data.split("\n")
    if lines[-1] == "":
        lines.pop()

    samples: list[ProcessSample] = []
    for number, line in enumerate(lines, start=1):
        fields = line.rsplit(FIELD_SEPARATOR, 2)
        if len(fields) < 3:
            raise MalformedRecord(number, line, "expected name;pid;cpu_ticks")
        name, pid, cpu_ticks = fields
        if not _UNSIGNED.fullmatch(pid):
            raise MalformedRecord(number, line, "pid is not an integer")
        if not _UNSIGNED.fullmatch(cpu_ticks):
            raise MalformedRecord(number, line, "cpu_ticks is not an integer")
        samples.append(ProcessSample(name=name, pid=int(pid), cpu_ticks=int(cpu_ticks)))
    return tuple(samples)


def raw_from_snapshot(snapshot: Snapshot, ticks_per_second: int) -> RawSnapshot:
    """Build the stored form of a snapshot."""
    return RawSnapshot(
        timestamp=snapshot.timestamp,
        ticks_per_second=ticks_per_second,
        data=encode_records(snapshot.samples),
    )


def snapshot_from_raw(raw: RawSnapshot) -> Snapshot:
    """Decode the records of a raw snapshot. Raises MalformedRecord."""
    return Snapshot(timestamp=raw.timestamp, samples=decode_records(raw.data))


def dumps_raw(raw: RawSnapshot) -> str:
    """Serialize a raw snapshot to a single JSON line (no trailing newline)."""
    return json.dumps(
        {
            "time": raw.timestamp.isoformat(),
            "ticks_per_second": raw.ticks_per_second,
            "data": raw.data,
        }
    )


def loads_raw(line: str) -> RawSnapshot:
    """Parse a JSON line written by dumps_raw().

    Raises:
        ParseError: The line is not a valid raw snapshot.
    """
    try:
        obj = json.loads(line)
        timestamp = datetime.fromisoformat(obj["time"])
        if timestamp.tzinfo is None:
            # Offsets are computed across snapshots; mixing naive and aware fails
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        ticks_per_second = obj["ticks_per_second"]
        data = obj["data"]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise ParseError(f"invalid raw snapshot: {e}") from e

    if (
        not isinstance(ticks_per_second, int)
        or isinstance(ticks_per_second, bool)
        or ticks_per_second <= 0
    ):
        raise ParseError(f"invalid ticks_per_second: {ticks_per_second!r}")
    if not isinstance(data, str):
        raise ParseError("raw snapshot data must be a string")
    return RawSnapshot(timestamp=timestamp, ticks_per_second=ticks_per_second, data=data)


def read_raw_lines(lines: Iterable[str]) -> list[RawSnapshot]:
    """Parse every non-blank JSON line."""
    return [loads_raw(line) for line in lines if line.strip()]
