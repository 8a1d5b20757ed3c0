"""System metric collectors for stat monitor."""

import os

import psutil

# Support both native and Docker-mounted paths
if os.path.exists('/host/proc'):
    psutil.PROCFS_PATH = '/host/proc'

from .system import SystemProvider  # noqa: E402
from .services import DockerStatusProvider, ServiceStatusProvider, SystemdStatusProvider  # noqa: E402

__all__ = [
    'SystemProvider',
    'ServiceStatusProvider',
    'SystemdStatusProvider',
    'DockerStatusProvider',
]
