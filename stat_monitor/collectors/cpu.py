"""CPU load metrics collector."""

import time
import logging
import threading

import psutil

logger = logging.getLogger(__name__)


class CpuPercentCache:
    """Shares one non-blocking CPU percent reading between callers.

    ``psutil.cpu_percent(interval=None)`` measures against the previous call,
    so per-core jobs running in the same tick would shrink each other's
    window to microseconds. Readings younger than ``max_age`` seconds are
    reused instead. Aggregate and per-core readings are cached separately.
    """

    def __init__(self, max_age: float = 0.5, clock=time.monotonic):
        self.max_age = max_age
        self._clock = clock
        self._lock = threading.Lock()
        self._cache = {}

    def read(self, percpu: bool = False):
        with self._lock:
            now = self._clock()
            cached = self._cache.get(percpu)
            if cached is not None and now - cached[0] < self.max_age:
                return cached[1]

            value = psutil.cpu_percent(interval=None, percpu=percpu)
            self._cache[percpu] = (now, value)
            return value


def cpu_count():
    """Number of logical CPUs, or None when it cannot be determined."""
    return psutil.cpu_count(logical=True)


def load_average() -> tuple:
    """1, 5 and 15 minute load averages."""
    return psutil.getloadavg()
