"""Tick-driven sampling loop.

Each metric instance gets its own interval job. ``max_instances=1`` keeps at
most one job per instance in flight, so an instance's policy and rate state
are only ever touched by one thread at a time. A slow check skips ticks for
its own instance and never delays the others.
"""

import time
import logging
import threading
from datetime import datetime

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler

from .errors import SampleError

logger = logging.getLogger(__name__)

MIN_WORKERS = 4


class MetricScheduler:
    """Runs sampler -> emission policy -> broadcaster for every instance."""

    def __init__(self, registry, sampler, broadcaster, check_frequency: float = 1.0,
                 max_workers: int = 0, clock=time.monotonic):
        self.registry = registry
        self.sampler = sampler
        self.broadcaster = broadcaster
        self.check_frequency = check_frequency
        self.max_workers = max_workers or max(len(registry), MIN_WORKERS)
        self.clock = clock
        self.scheduler = None

    def process(self, instance) -> bool:
        """Sample one instance and broadcast if the policy says so."""
        now = self.clock()
        try:
            value = self.sampler.sample(instance, now)
        except SampleError as e:
            logger.debug(f"Skipping {instance.name} this tick: {e}")
            return False

        decision = instance.policy.evaluate(value, now)
        if not decision.emits:
            return False

        logger.debug(f"{instance.name}: {decision.value} emission")
        self.broadcaster.broadcast(instance.name, value)
        return True

    def run_once(self) -> int:
        """Sample every instance once, in order, on the calling thread.

        Returns the emission count.
        """
        emitted = 0
        for instance in self.registry:
            if self._run_job(instance):
                emitted += 1
        return emitted

    def start(self, immediate: bool = False):
        """Start the periodic per-instance jobs.

        With ``immediate`` every job also runs once right away on the pool,
        so one slow check never holds back the first emission of the others.
        """
        job_options = {}
        if immediate:
            job_options['next_run_time'] = datetime.now()

        scheduler = BackgroundScheduler(
            executors={'default': ThreadPoolExecutor(self.max_workers)},
            job_defaults={'coalesce': True, 'max_instances': 1},
        )

        for instance in self.registry:
            scheduler.add_job(
                self._run_job,
                'interval',
                seconds=self.check_frequency,
                args=[instance],
                id=instance.name,
                name=instance.name,
                replace_existing=True,
                **job_options
            )

        scheduler.start()
        self.scheduler = scheduler
        logger.debug(f"Scheduled {len(self.registry)} jobs every {self.check_frequency}s")
        return scheduler

    def shutdown(self):
        """Stop ticking; in-flight jobs are left to finish on their own."""
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.scheduler = None

    def run_forever(self, stop_event: threading.Event):
        """Immediate pass, then tick until ``stop_event`` is set."""
        logger.info("Broadcasting initial baseline stats...")
        self.start(immediate=True)
        try:
            stop_event.wait()
        finally:
            logger.info("Shutting down...")
            self.shutdown()

    def _run_job(self, instance) -> bool:
        try:
            return self.process(instance)
        except Exception as e:
            logger.error(f"Error processing {instance.name}: {e}")
            return False
