"""Query interface consumed by the visualization layer."""

from collections.abc import Sequence
from urllib.parse import parse_qsl

import structlog

from procseries.codec import snapshot_from_raw
from procseries.errors import NoData, UnsupportedApi
from procseries.models import RawSnapshot, Snapshot
from procseries.series import SeriesBuilder, result_to_json
from procseries.tickrate import TickRate

log = structlog.get_logger()

VALUES_CALL = "values"


class ProcessesView:
    """
    Turns stored raw snapshots into the `values` JSON document.

    Raw snapshots carry the tick rate they were recorded with; the first one
    processed fixes the rate for this view and later ones must agree.
    """

    def __init__(self, tick_rate: TickRate | None = None) -> None:
        self._tick_rate = tick_rate if tick_rate is not None else TickRate()

    @property
    def tick_rate(self) -> TickRate:
        return self._tick_rate

    def process_raw_data(self, raw: RawSnapshot) -> Snapshot:
        """Decode one raw snapshot. Raises MalformedRecord or TickRateConflict."""
        self._tick_rate.set(raw.ticks_per_second)
        return snapshot_from_raw(raw)

    def get_calls(self) -> list[str]:
        return [VALUES_CALL]

    def get_data(self, buffer: Sequence[Snapshot], query: str) -> str:
        """
        Answer a query such as `name=processes&get=values`.

        The operation is the value of the second query parameter.

        Raises:
            UnsupportedApi: Too few parameters or an unknown operation.
            NoData: buffer is empty.
        """
        params = parse_qsl(query, keep_blank_values=True)
        if len(params) < 2:
            raise UnsupportedApi(f"not enough arguments in query {query!r}")
        _, call = params[1]

        if call == VALUES_CALL:
            return self.values(buffer)
        log.warning("unsupported_api", call=call)
        raise UnsupportedApi(f"unsupported API {call!r}")

    def values(self, buffer: Sequence[Snapshot]) -> str:
        if not buffer:
            raise NoData("no processed snapshots buffered")
        builder = SeriesBuilder(self._tick_rate.get())
        return result_to_json(builder.derive(buffer))
