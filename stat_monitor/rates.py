"""Counter-delta rate computation for network throughput."""

from typing import Optional

from .errors import RateNotReadyError, TimeSkewError

BITS_PER_BYTE = 8
BITS_PER_MEGABIT = 1024 * 1024


class RateComputer:
    """Turns successive readings of a byte counter into megabits per second.

    The first reading only stores a baseline. Every later reading replaces
    the baseline before the rate is validated, so one bad interval does not
    poison the next one.
    """

    def __init__(self):
        self.last_counter: Optional[int] = None
        self.last_time: Optional[float] = None

    @property
    def ready(self) -> bool:
        return self.last_time is not None

    def update(self, counter: int, now: float) -> float:
        if self.last_time is None:
            self.last_counter = counter
            self.last_time = now
            raise RateNotReadyError('initializing rate baseline')

        delta_bytes = counter - self.last_counter
        delta_seconds = now - self.last_time

        self.last_counter = counter
        self.last_time = now

        if delta_seconds <= 0:
            raise TimeSkewError(f'non-positive sample interval ({delta_seconds:.6f}s)')

        mbps = (delta_bytes * BITS_PER_BYTE) / BITS_PER_MEGABIT / delta_seconds
        # Counter resets and wraparound show up as negative deltas
        return max(mbps, 0.0)
