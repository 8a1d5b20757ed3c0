"""Broadcaster: writes one line per emitted metric value."""

import sys
import logging
import threading

BROADCAST_FORMAT = '[BROADCAST] %s: %.2f'


def format_broadcast(name: str, value: float) -> str:
    return BROADCAST_FORMAT % (name, value)


class Broadcaster:
    """Writes broadcast lines to a stream through a dedicated logger.

    The logger does not propagate, so broadcast lines never mix with the
    diagnostic log format.
    """

    def __init__(self, stream=None, logger_name: str = 'stat_monitor.broadcast'):
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)

        handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
        handler.setFormatter(logging.Formatter('%(message)s'))
        self.logger.addHandler(handler)

        self._lock = threading.Lock()
        self.emitted = 0

    def broadcast(self, name: str, value: float):
        self.logger.info(BROADCAST_FORMAT, name, value)
        with self._lock:
            self.emitted += 1
