"""Network I/O counter collector."""

import logging

import psutil

from ..errors import SampleError

logger = logging.getLogger(__name__)


def net_io_counters():
    """Cumulative bytes sent/received, summed over all interfaces."""
    counters = psutil.net_io_counters(pernic=False)
    if counters is None:
        raise SampleError('no network interfaces found')
    return counters
