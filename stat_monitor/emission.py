"""Per-instance emission policy.

Decides from a new value and the current time whether a metric should be
broadcast. Rules are applied in order:

1. The first evaluation always emits.
2. Once ``resend_interval`` has elapsed since the last emission, emit
   regardless of the value (heartbeat).
3. Once ``interval`` has elapsed, emit if the value moved by at least
   ``diff`` from the last emitted value.
4. Otherwise stay silent.

``resend_interval`` is not required to be larger than ``interval``; when it
is smaller it simply wins.
"""

from enum import Enum
from typing import Optional


class Decision(Enum):
    INITIAL = 'initial'
    HEARTBEAT = 'heartbeat'
    CHANGED = 'changed'
    SUPPRESSED = 'suppressed'

    @property
    def emits(self) -> bool:
        return self is not Decision.SUPPRESSED


class EmissionPolicy:
    """Emission state machine for a single metric instance."""

    def __init__(self, diff: float = 0.0, interval: float = 0.0, resend_interval: float = 0.0):
        self.diff = diff
        self.interval = interval
        self.resend_interval = resend_interval

        self.initialized = False
        self.last_value: Optional[float] = None
        self.last_emitted_at: Optional[float] = None

    def evaluate(self, value: float, now: float) -> Decision:
        """Apply the rules to ``value`` sampled at ``now`` and update the baseline."""
        if not self.initialized:
            self._record(value, now)
            self.initialized = True
            return Decision.INITIAL

        elapsed = now - self.last_emitted_at

        if elapsed >= self.resend_interval:
            self._record(value, now)
            return Decision.HEARTBEAT

        if elapsed >= self.interval and abs(value - self.last_value) >= self.diff:
            self._record(value, now)
            return Decision.CHANGED

        return Decision.SUPPRESSED

    def seconds_since_emit(self, now: float) -> Optional[float]:
        if self.last_emitted_at is None:
            return None
        return now - self.last_emitted_at

    def _record(self, value: float, now: float):
        self.last_value = value
        # Never move the baseline backwards
        if self.last_emitted_at is None or now > self.last_emitted_at:
            self.last_emitted_at = now
