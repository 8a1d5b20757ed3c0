"""Disk usage metrics collector."""

import logging

import psutil

logger = logging.getLogger(__name__)

# Filtering constants
REAL_STORAGE_FSTYPES = frozenset({'ext4', 'xfs', 'apfs', 'zfs'})
REAL_DEVICE_PREFIX = '/dev/'

ROOT_SUFFIX = '_root'


def disk_usage(path: str):
    """Usage of the filesystem holding ``path`` (total, used, free, percent)."""
    return psutil.disk_usage(path)


def disk_partitions() -> list:
    """Mounted physical filesystems (device, mountpoint, fstype)."""
    return psutil.disk_partitions(all=False)


def is_real_storage(partition) -> bool:
    """True for mounts backed by a block device or a known disk filesystem."""
    return (partition.device.startswith(REAL_DEVICE_PREFIX)
            or partition.fstype in REAL_STORAGE_FSTYPES)


def mount_suffix(mountpoint: str) -> str:
    """Name suffix for a mount point: '/var/log' -> '_var_log', '/' -> '_root'."""
    clean = mountpoint.replace('/', '_').replace('\\', '_')
    if clean == '_':
        return ROOT_SUFFIX
    return clean


def eligible_partitions(partitions) -> list:
    """Filter partitions to real storage, one entry per mount point."""
    seen = set()
    eligible = []
    for partition in partitions:
        if not is_real_storage(partition):
            logger.debug(f"Skipping {partition.mountpoint} ({partition.device}, {partition.fstype})")
            continue
        if partition.mountpoint in seen:
            continue
        seen.add(partition.mountpoint)
        eligible.append(partition)
    return eligible
