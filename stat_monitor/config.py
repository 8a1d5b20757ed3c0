"""Configuration settings for stat monitor.

Process settings come from environment variables (``Config``). The metric
definitions come from a YAML file validated into one model per metric type.
"""

import os
import re
import logging
from datetime import timedelta
from typing import Annotated, Dict, Literal, Union

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)


class Config:
    """Application configuration."""

    # Metric definitions file
    CONFIG_PATH = os.environ.get('STAT_MONITOR_CONFIG', 'config.yaml')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Status API (disabled when port is 0)
    STATUS_HOST = os.environ.get('STATUS_HOST', '127.0.0.1')
    STATUS_PORT = int(os.environ.get('STATUS_PORT', 0))

    # Sampling thread pool size (0 = one thread per metric instance)
    MAX_WORKERS = int(os.environ.get('MAX_WORKERS', 0))


# --- Durations ---

_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)')

_UNIT_SECONDS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,
    'ms': 1e-3,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}


def parse_duration(value) -> float:
    """Convert a duration to seconds.

    Accepts Go-style strings ("500ms", "5s", "1m30s", "2h"), bare numbers
    (seconds) and ``timedelta`` objects.
    """
    if isinstance(value, bool):
        raise ValueError(f'invalid duration: {value!r}')
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, timedelta):
        return value.total_seconds()
    if not isinstance(value, str):
        raise ValueError(f'invalid duration: {value!r}')

    text = value.strip()
    if text == '0':
        return 0.0

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f'invalid duration: {value!r}')
    return total


Duration = Annotated[float, BeforeValidator(parse_duration), Field(ge=0)]
Frequency = Annotated[float, BeforeValidator(parse_duration), Field(gt=0)]


# --- Metric definitions ---

DiskMeasure = Literal['percent_used', 'percent_free', 'used_gb', 'free_gb', 'used_mb', 'free_mb']
MemoryMeasure = Literal['percent', 'free_gb']


class MetricBase(BaseModel):
    """Fields shared by every metric definition."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    diff: float = Field(default=0.0, ge=0)
    interval: Duration = 0.0
    resend_interval: Duration = 0.0


class DiskMetric(MetricBase):
    type: Literal['disk']
    path: str = Field(min_length=1)
    measure: DiskMeasure = 'percent_used'


class DiskAutoMetric(MetricBase):
    type: Literal['disk_auto']
    measure: DiskMeasure = 'percent_used'


class ServiceMetric(MetricBase):
    type: Literal['service']
    service: str = Field(min_length=1)
    manager: Literal['systemd', 'docker'] = 'systemd'


class NetRateMetric(MetricBase):
    type: Literal['net_rate']
    measure: Literal['rx_mbps', 'tx_mbps'] = 'rx_mbps'


class CpuMetric(MetricBase):
    type: Literal['cpu']
    measure: Literal['total', 'per_core'] = 'total'


class MemMetric(MetricBase):
    type: Literal['mem']
    measure: MemoryMeasure = 'percent'


class SwapMetric(MetricBase):
    type: Literal['swap']
    measure: MemoryMeasure = 'percent'


class LoadMetric(MetricBase):
    type: Literal['load']


class UptimeMetric(MetricBase):
    type: Literal['uptime']


MetricDefinition = Annotated[
    Union[
        DiskMetric,
        DiskAutoMetric,
        ServiceMetric,
        NetRateMetric,
        CpuMetric,
        MemMetric,
        SwapMetric,
        LoadMetric,
        UptimeMetric,
    ],
    Field(discriminator='type'),
]


class GlobalSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')

    check_frequency: Frequency = 1.0


class MonitorConfig(BaseModel):
    """Validated contents of the metrics YAML file."""

    model_config = ConfigDict(frozen=True, extra='forbid', populate_by_name=True)

    settings: GlobalSettings = Field(default_factory=GlobalSettings, alias='global')
    metrics: Dict[str, MetricDefinition] = Field(default_factory=dict)

    @property
    def check_frequency(self) -> float:
        return self.settings.check_frequency


def parse_config(raw, source: str = '<config>') -> MonitorConfig:
    """Validate an already-parsed YAML document."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f'{source}: top level must be a mapping')
    try:
        return MonitorConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f'{source}: invalid configuration\n{e}') from e


def load_config(path: str) -> MonitorConfig:
    """Read and validate the metrics YAML file."""
    try:
        with open(path, 'r') as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f'Cannot read config {path}: {e}') from e
    except yaml.YAMLError as e:
        raise ConfigError(f'Malformed YAML in {path}: {e}') from e

    config = parse_config(raw, source=path)
    logger.debug(f"Loaded {len(config.metrics)} metric definitions from {path}")
    return config
