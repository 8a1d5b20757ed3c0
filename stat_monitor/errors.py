"""Exception hierarchy for stat-monitor."""


class MonitorError(Exception):
    """Base class for all stat-monitor errors."""

    pass


class ConfigError(MonitorError):
    """Configuration file is unreadable, malformed or invalid."""

    pass


class DiscoveryError(MonitorError):
    """Auto-discovery of metric targets failed at startup."""

    pass


class SampleError(MonitorError):
    """A metric could not be sampled this tick."""

    pass


class RateNotReadyError(SampleError):
    """Counter baseline was just recorded; no rate is available yet."""

    pass


class TimeSkewError(SampleError):
    """Elapsed time between two counter readings was not positive."""

    pass


class UnknownKindError(SampleError):
    """No sampler exists for the metric kind."""

    pass
