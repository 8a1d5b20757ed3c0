"""Sampler: reads the current value of a metric instance."""

import logging
from typing import Dict, Optional

from .collectors.services import DockerStatusProvider, ServiceStatusProvider, SystemdStatusProvider
from .errors import SampleError, UnknownKindError

logger = logging.getLogger(__name__)

MB = 1024 ** 2
GB = 1024 ** 3


class Sampler:
    """Dispatches an instance to the measurement for its metric type.

    ``sample`` returns a float or raises ``SampleError``. Provider failures
    are wrapped so callers only ever deal with one exception family.
    """

    def __init__(self, provider, service_providers: Optional[Dict[str, ServiceStatusProvider]] = None):
        self.provider = provider
        if service_providers is None:
            service_providers = {
                'systemd': SystemdStatusProvider(),
                'docker': DockerStatusProvider(),
            }
        self.service_providers = service_providers

        self._handlers = {
            'disk': self._sample_disk,
            'disk_auto': self._sample_disk,
            'service': self._sample_service,
            'net_rate': self._sample_net_rate,
            'cpu': self._sample_cpu,
            'mem': self._sample_memory,
            'swap': self._sample_swap,
            'load': self._sample_load,
            'uptime': self._sample_uptime,
        }

    def sample(self, instance, now: float) -> float:
        handler = self._handlers.get(instance.kind)
        if handler is None:
            raise UnknownKindError(f'unknown metric type {instance.kind!r} for {instance.name}')

        try:
            return float(handler(instance, now))
        except SampleError:
            raise
        except Exception as e:
            raise SampleError(f'{instance.name}: {e}') from e

    def _sample_disk(self, instance, now):
        usage = self.provider.disk_usage(instance.target)
        measure = instance.definition.measure

        if measure == 'percent_free':
            return 100.0 - usage.percent
        if measure == 'used_gb':
            return usage.used / GB
        if measure == 'free_gb':
            return usage.free / GB
        if measure == 'used_mb':
            return usage.used / MB
        if measure == 'free_mb':
            return usage.free / MB
        # psutil percent is used/(used+free), excluding root-reserved blocks
        return usage.percent

    def _sample_service(self, instance, now):
        manager = instance.definition.manager
        status = self.service_providers.get(manager)
        if status is None:
            raise SampleError(f'no status provider for {manager}')
        return 1.0 if status.is_active(instance.target) else 0.0

    def _sample_net_rate(self, instance, now):
        counters = self.provider.net_io_counters()
        if instance.definition.measure == 'tx_mbps':
            raw = counters.bytes_sent
        else:
            raw = counters.bytes_recv
        return instance.rate.update(raw, now)

    def _sample_cpu(self, instance, now):
        if instance.definition.measure == 'per_core':
            per_core = self.provider.cpu_percent(percpu=True)
            index = instance.target
            if index >= len(per_core):
                raise SampleError(f'core {index} not reported ({len(per_core)} cores)')
            return per_core[index]
        return self.provider.cpu_percent()

    def _sample_memory(self, instance, now):
        return self._memory_value(self.provider.virtual_memory(), instance.definition.measure)

    def _sample_swap(self, instance, now):
        return self._memory_value(self.provider.swap_memory(), instance.definition.measure)

    def _sample_load(self, instance, now):
        return self.provider.load_average()[1]

    def _sample_uptime(self, instance, now):
        return self.provider.uptime_seconds() / 3600

    @staticmethod
    def _memory_value(stats, measure):
        if measure == 'free_gb':
            return stats.free / GB
        return stats.percent
