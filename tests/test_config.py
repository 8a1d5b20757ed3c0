"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from stat_monitor.config import (
    CpuMetric,
    DiskMetric,
    MonitorConfig,
    NetRateMetric,
    ServiceMetric,
    load_config,
    parse_config,
    parse_duration,
)
from stat_monitor.errors import ConfigError

SAMPLE_CONFIG = Path(__file__).resolve().parent.parent / 'config.yaml.sample'


class TestParseDuration:

    @pytest.mark.parametrize('text,seconds', [
        ('5s', 5.0),
        ('500ms', 0.5),
        ('1m30s', 90.0),
        ('2h', 7200.0),
        ('1.5h', 5400.0),
        ('250us', 0.00025),
        ('0', 0.0),
        (' 10m ', 600.0),
    ])
    def test_go_style_strings(self, text, seconds):
        assert parse_duration(text) == pytest.approx(seconds)

    @pytest.mark.parametrize('value', [3, 2.5, 0])
    def test_numbers_are_seconds(self, value):
        assert parse_duration(value) == float(value)

    @pytest.mark.parametrize('text', ['', 'abc', '5', '5 s', '5x', 's5', '1m-3s', '-5s'])
    def test_invalid_strings(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_booleans_rejected(self):
        with pytest.raises(ValueError):
            parse_duration(True)


class TestParseConfig:

    def test_defaults(self):
        config = parse_config({'metrics': {'load5': {'type': 'load'}}})

        assert config.check_frequency == 1.0
        load = config.metrics['load5']
        assert load.diff == 0.0
        assert load.interval == 0.0
        assert load.resend_interval == 0.0

    def test_empty_document(self):
        config = parse_config(None)
        assert isinstance(config, MonitorConfig)
        assert config.metrics == {}

    def test_tagged_variants(self):
        config = parse_config({
            'global': {'check_frequency': '2s'},
            'metrics': {
                'root': {'type': 'disk', 'path': '/', 'diff': 1, 'interval': '30s', 'resend_interval': '10m'},
                'nginx': {'type': 'service', 'service': 'nginx'},
                'net_tx': {'type': 'net_rate', 'measure': 'tx_mbps'},
                'cores': {'type': 'cpu', 'measure': 'per_core'},
            },
        })

        assert config.check_frequency == 2.0
        assert isinstance(config.metrics['root'], DiskMetric)
        assert config.metrics['root'].interval == 30.0
        assert config.metrics['root'].resend_interval == 600.0
        assert isinstance(config.metrics['nginx'], ServiceMetric)
        assert config.metrics['nginx'].manager == 'systemd'
        assert isinstance(config.metrics['net_tx'], NetRateMetric)
        assert isinstance(config.metrics['cores'], CpuMetric)

    def test_metric_order_preserved(self):
        config = parse_config({'metrics': {
            'b': {'type': 'load'},
            'a': {'type': 'uptime'},
            'c': {'type': 'mem'},
        }})
        assert list(config.metrics) == ['b', 'a', 'c']

    def test_resend_shorter_than_interval_is_accepted(self):
        config = parse_config({'metrics': {
            'm': {'type': 'mem', 'interval': '1m', 'resend_interval': '5s'},
        }})
        assert config.metrics['m'].resend_interval < config.metrics['m'].interval

    @pytest.mark.parametrize('metric', [
        {'type': 'gpu'},
        {'measure': 'percent'},
        {'type': 'disk'},
        {'type': 'disk', 'path': '/', 'measure': 'inodes'},
        {'type': 'service'},
        {'type': 'service', 'service': 'x', 'manager': 'upstart'},
        {'type': 'cpu', 'measure': 'per_socket'},
        {'type': 'mem', 'path': '/'},
        {'type': 'load', 'interval': 'soon'},
        {'type': 'load', 'resend_interval': -1},
        {'type': 'load', 'diff': -0.5},
    ])
    def test_invalid_metric_rejected(self, metric):
        with pytest.raises(ConfigError):
            parse_config({'metrics': {'bad': metric}})

    def test_zero_diff_is_accepted(self):
        config = parse_config({'metrics': {'m': {'type': 'mem', 'diff': 0}}})
        assert config.metrics['m'].diff == 0.0

    @pytest.mark.parametrize('frequency', [0, '0', '-1s'])
    def test_check_frequency_must_be_positive(self, frequency):
        with pytest.raises(ConfigError):
            parse_config({'global': {'check_frequency': frequency}})

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigError):
            parse_config(['metrics'])

    def test_definitions_are_immutable(self):
        config = parse_config({'metrics': {'m': {'type': 'mem'}}})
        with pytest.raises(Exception):
            config.metrics['m'].diff = 4.0


class TestLoadConfig:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / 'nope.yaml'))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text('metrics: [unclosed\n')

        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_reads_file(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(
            'global:\n'
            '  check_frequency: 500ms\n'
            'metrics:\n'
            '  disk:\n'
            '    type: disk_auto\n'
            '    diff: 1\n'
            '    interval: 30s\n'
        )

        config = load_config(str(path))
        assert config.check_frequency == 0.5
        assert config.metrics['disk'].type == 'disk_auto'
        assert config.metrics['disk'].measure == 'percent_used'

    def test_sample_config_is_valid(self):
        config = load_config(str(SAMPLE_CONFIG))

        assert config.check_frequency == 1.0
        assert config.metrics['postgres_container'].manager == 'docker'
        assert config.metrics['cpu_cores'].measure == 'per_core'
