"""Metric registry: expands definitions into uniquely named instances."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Union

from .collectors.disk import eligible_partitions, mount_suffix
from .emission import EmissionPolicy
from .errors import DiscoveryError
from .rates import RateComputer

logger = logging.getLogger(__name__)

CPU_CORE_PREFIX = 'cpu_core_'


@dataclass
class MetricInstance:
    """One concrete metric: a definition bound to a target plus its state."""

    name: str
    definition: object
    target: Optional[Union[str, int]] = None
    policy: EmissionPolicy = field(init=False)
    rate: Optional[RateComputer] = field(init=False, default=None)

    def __post_init__(self):
        self.policy = EmissionPolicy(
            diff=self.definition.diff,
            interval=self.definition.interval,
            resend_interval=self.definition.resend_interval,
        )
        if self.kind == 'net_rate':
            self.rate = RateComputer()

    @property
    def kind(self) -> str:
        return self.definition.type

    def snapshot(self, now: float) -> dict:
        return {
            'name': self.name,
            'type': self.kind,
            'target': self.target,
            'initialized': self.policy.initialized,
            'last_value': self.policy.last_value,
            'seconds_since_emit': self.policy.seconds_since_emit(now),
        }


class MetricRegistry:
    """Ordered collection of metric instances keyed by unique name."""

    def __init__(self):
        self._instances: Dict[str, MetricInstance] = {}

    def add(self, instance: MetricInstance):
        if instance.name in self._instances:
            raise ValueError(f'duplicate metric name: {instance.name}')
        self._instances[instance.name] = instance

    def get(self, name: str) -> Optional[MetricInstance]:
        return self._instances.get(name)

    def names(self) -> List[str]:
        return list(self._instances)

    def snapshot(self, now: float) -> List[dict]:
        return [instance.snapshot(now) for instance in self]

    def __contains__(self, name) -> bool:
        return name in self._instances

    def __iter__(self) -> Iterator[MetricInstance]:
        return iter(list(self._instances.values()))

    def __len__(self) -> int:
        return len(self._instances)


def build_registry(definitions: Mapping[str, object], provider) -> MetricRegistry:
    """Expand every definition into instances.

    Discovery failures skip only the affected definition.
    """
    registry = MetricRegistry()

    for key, definition in definitions.items():
        try:
            instances = expand_definition(key, definition, provider)
        except DiscoveryError as e:
            logger.error(f"Skipping {key}: {e}")
            continue

        for instance in instances:
            if instance.name in registry:
                logger.warning(f"Duplicate metric name {instance.name} from {key}, skipping")
                continue
            registry.add(instance)

    logger.info(f"Registered {len(registry)} metric instances")
    return registry


def expand_definition(key: str, definition, provider) -> List[MetricInstance]:
    if definition.type == 'disk_auto':
        return _expand_disks(key, definition, provider)

    if definition.type == 'cpu' and definition.measure == 'per_core':
        return _expand_cores(definition, provider)

    return [MetricInstance(name=key, definition=definition, target=_static_target(definition))]


def _static_target(definition):
    if definition.type == 'disk':
        return definition.path
    if definition.type == 'service':
        return definition.service
    return None


def _expand_disks(key: str, definition, provider) -> List[MetricInstance]:
    try:
        partitions = provider.disk_partitions()
    except Exception as e:
        raise DiscoveryError(f'error detecting partitions: {e}') from e

    instances = []
    taken = set()
    for partition in eligible_partitions(partitions):
        name = _unique_name(f'{key}{mount_suffix(partition.mountpoint)}', taken)
        taken.add(name)
        instances.append(MetricInstance(name=name, definition=definition, target=partition.mountpoint))
        logger.info(f"Discovered disk: {partition.mountpoint} -> {name}")
    return instances


def _unique_name(name: str, taken) -> str:
    """Append _2, _3, ... when distinct mounts map to the same name (/a_b, /a/b)."""
    if name not in taken:
        return name
    index = 2
    while f'{name}_{index}' in taken:
        index += 1
    return f'{name}_{index}'


def _expand_cores(definition, provider) -> List[MetricInstance]:
    try:
        count = provider.cpu_count()
    except Exception as e:
        raise DiscoveryError(f'error counting CPUs: {e}') from e

    if not count:
        raise DiscoveryError('CPU count unavailable')

    return [
        MetricInstance(name=f'{CPU_CORE_PREFIX}{index}', definition=definition, target=index)
        for index in range(count)
    ]
