"""Process entry point and optional Flask status API for stat monitor."""

import sys
import time
import signal
import logging
import threading

from flask import Flask, jsonify

from .broadcaster import Broadcaster
from .collectors import SystemProvider
from .config import Config, load_config
from .errors import ConfigError
from .registry import build_registry
from .sampler import Sampler
from .scheduler import MetricScheduler

logger = logging.getLogger(__name__)


def create_app(registry, broadcaster=None, check_frequency: float = None, clock=time.monotonic) -> Flask:
    """Build the read-only status API over a metric registry."""
    app = Flask(__name__)

    @app.route('/health')
    def health_check():
        """Health check endpoint."""
        return jsonify({'status': 'healthy'})

    @app.route('/api/metrics')
    def list_metrics():
        """Current baseline of every metric instance."""
        metrics = registry.snapshot(clock())
        return jsonify({'count': len(metrics), 'metrics': metrics})

    @app.route('/api/metrics/<name>')
    def get_metric(name):
        """Current baseline of one metric instance."""
        instance = registry.get(name)
        if instance is None:
            return jsonify({'error': f'Unknown metric: {name}'}), 404
        return jsonify(instance.snapshot(clock()))

    @app.route('/api/config')
    def get_config():
        """Get current configuration."""
        return jsonify({
            'check_frequency_seconds': check_frequency,
            'metric_count': len(registry),
            'emitted': broadcaster.emitted if broadcaster is not None else None,
        })

    return app


def start_status_server(app: Flask, host: str, port: int) -> threading.Thread:
    """Serve the status API from a daemon thread."""
    thread = threading.Thread(
        target=app.run,
        kwargs={'host': host, 'port': port, 'debug': False, 'use_reloader': False},
        name='status-api',
        daemon=True
    )
    thread.start()
    logger.info(f"Status API listening on {host}:{port}")
    return thread


def install_signal_handlers(stop_event: threading.Event):
    def _handle(signum, frame):
        logger.info(f"Received signal {signum}")
        stop_event.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def main():
    # Configure logging
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = load_config(Config.CONFIG_PATH)
    except ConfigError as e:
        logger.error(f"Error loading config: {e}")
        sys.exit(1)

    provider = SystemProvider(cpu_cache_age=config.check_frequency / 2)
    registry = build_registry(config.metrics, provider)
    broadcaster = Broadcaster()
    scheduler = MetricScheduler(
        registry,
        Sampler(provider),
        broadcaster,
        check_frequency=config.check_frequency,
        max_workers=Config.MAX_WORKERS
    )

    stop_event = threading.Event()
    install_signal_handlers(stop_event)

    if Config.STATUS_PORT:
        app = create_app(registry, broadcaster, check_frequency=config.check_frequency)
        start_status_server(app, Config.STATUS_HOST, Config.STATUS_PORT)

    logger.info("Service started. Watching metrics...")
    scheduler.run_forever(stop_event)


if __name__ == '__main__':
    main()
