"""Clock-tick rate shared by the sampler and the series builder.

The rate is written once (when the sampler prepares, or when the first raw
snapshot is processed) and read many times afterwards. Writes and reads go
through a lock so a reader on another thread never sees a half-initialized
cell.
"""

import os
import threading

import structlog

from procseries.errors import TickRateConflict, TickRateUnset

log = structlog.get_logger()

DEFAULT_TICKS_PER_SECOND = 100  # USER_HZ on nearly every Linux build


def resolve_ticks_per_second() -> int:
    """Ask the platform how many clock ticks make up one second."""
    try:
        rate = os.sysconf("SC_CLK_TCK")
    except (AttributeError, ValueError, OSError):
        # No sysconf on this platform
        log.warning("tick_rate_fallback", ticks_per_second=DEFAULT_TICKS_PER_SECOND)
        return DEFAULT_TICKS_PER_SECOND
    if rate <= 0:
        log.warning("tick_rate_invalid", reported=rate, ticks_per_second=DEFAULT_TICKS_PER_SECOND)
        return DEFAULT_TICKS_PER_SECOND
    return int(rate)


class TickRate:
    """Write-once, read-many holder for the ticks-per-second constant."""

    def __init__(self, value: int | None = None) -> None:
        self._lock = threading.Lock()
        self._value: int | None = None
        if value is not None:
            self.set(value)

    @property
    def is_set(self) -> bool:
        """Check whether the rate has been established."""
        with self._lock:
            return self._value is not None

    def set(self, value: int) -> int:
        """
        Establish the rate.

        Setting the value already held is a no-op. Setting a different one
        raises TickRateConflict: ticks recorded at one rate must not be
        converted with another.
        """
        if value <= 0:
            raise ValueError(f"ticks per second must be positive, got {value}")
        with self._lock:
            if self._value is None:
                self._value = value
                log.debug("tick_rate_set", ticks_per_second=value)
            elif self._value != value:
                raise TickRateConflict(
                    f"tick rate already set to {self._value}, refusing {value}"
                )
            return self._value

    def resolve(self) -> int:
        """Set the rate from the platform unless already set. Idempotent."""
        with self._lock:
            if self._value is not None:
                return self._value
        return self.set(resolve_ticks_per_second())

    def get(self) -> int:
        """Return the rate, failing fast if it was never set."""
        with self._lock:
            if self._value is None:
                raise TickRateUnset("tick rate read before it was set")
            return self._value
