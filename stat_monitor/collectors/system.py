"""psutil-backed metric source provider."""

import time
import logging

import psutil

from . import cpu, disk, network

logger = logging.getLogger(__name__)


class SystemProvider:
    """Raw OS measurements consumed by the sampler and the registry."""

    def __init__(self, cpu_cache_age: float = 0.5):
        self._cpu = cpu.CpuPercentCache(max_age=cpu_cache_age)

    def disk_usage(self, path: str):
        return disk.disk_usage(path)

    def disk_partitions(self) -> list:
        return disk.disk_partitions()

    def cpu_percent(self, percpu: bool = False):
        return self._cpu.read(percpu=percpu)

    def cpu_count(self):
        return cpu.cpu_count()

    def virtual_memory(self):
        return psutil.virtual_memory()

    def swap_memory(self):
        return psutil.swap_memory()

    def net_io_counters(self):
        return network.net_io_counters()

    def load_average(self) -> tuple:
        return cpu.load_average()

    def uptime_seconds(self) -> float:
        return time.time() - psutil.boot_time()
