"""Shared pytest fixtures for stat monitor tests."""

import io
from collections import namedtuple

import pytest

from stat_monitor.broadcaster import Broadcaster
from stat_monitor.config import parse_config

DiskUsage = namedtuple('DiskUsage', ['total', 'used', 'free', 'percent'])
Partition = namedtuple('Partition', ['device', 'mountpoint', 'fstype', 'opts'])
MemoryStats = namedtuple('MemoryStats', ['percent', 'free'])
NetCounters = namedtuple('NetCounters', ['bytes_sent', 'bytes_recv'])

GB = 1024 ** 3


class FakeProvider:
    """In-memory stand-in for SystemProvider."""

    def __init__(self):
        self.partitions = []
        self.usage = {}
        self.cpu_total = 12.5
        self.cpu_cores = [10.0, 20.0, 30.0, 40.0]
        self.core_count = 4
        self.memory = MemoryStats(percent=42.0, free=2 * GB)
        self.swap = MemoryStats(percent=5.0, free=GB)
        self.net = NetCounters(bytes_sent=0, bytes_recv=0)
        self.load = (0.5, 1.25, 2.0)
        self.uptime = 7200.0
        self.fail = set()

    def _check(self, name):
        if name in self.fail:
            raise OSError(f'{name} failed')

    def disk_usage(self, path):
        self._check('disk_usage')
        return self.usage[path]

    def disk_partitions(self):
        self._check('disk_partitions')
        return list(self.partitions)

    def cpu_percent(self, percpu=False):
        self._check('cpu_percent')
        return list(self.cpu_cores) if percpu else self.cpu_total

    def cpu_count(self):
        self._check('cpu_count')
        return self.core_count

    def virtual_memory(self):
        self._check('virtual_memory')
        return self.memory

    def swap_memory(self):
        self._check('swap_memory')
        return self.swap

    def net_io_counters(self):
        self._check('net_io_counters')
        return self.net

    def load_average(self):
        self._check('load_average')
        return self.load

    def uptime_seconds(self):
        self._check('uptime_seconds')
        return self.uptime


class FakeStatus:
    """Service status provider answering from a set of active names."""

    def __init__(self, active=()):
        self.active = set(active)
        self.calls = []

    def is_active(self, name):
        self.calls.append(name)
        return name in self.active


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def broadcaster(stream):
    return Broadcaster(stream=stream, logger_name='stat_monitor.broadcast.test')


def make_definitions(metrics: dict, check_frequency='1s') -> dict:
    """Validate a metrics mapping the same way the YAML loader does."""
    config = parse_config({'global': {'check_frequency': check_frequency}, 'metrics': metrics})
    return config.metrics
