from __future__ import annotations

import psutil
from loguru import logger

from .models import SystemResources, Usage

_MB = 1024 * 1024


def _cpu_usage() -> str:
    try:
        # Non-blocking: usage since the previous call in this process.
        percent = psutil.cpu_percent(interval=None)
    except Exception as exc:  # noqa: BLE001
        logger.debug(f"CPU usage unavailable: {exc}")
        percent = 0.0
    return f"{percent:.2f}%"


def _memory_usage() -> Usage:
    try:
        mem = psutil.virtual_memory()
    except Exception as exc:  # noqa: BLE001
        logger.debug(f"Memory usage unavailable: {exc}")
        return Usage()
    return Usage(used=mem.used // _MB, total=mem.total // _MB)


def _disk_usage() -> Usage:
    try:
        partitions = psutil.disk_partitions(all=False)
    except Exception as exc:  # noqa: BLE001
        logger.debug(f"Disk partitions unavailable: {exc}")
        return Usage()

    used = 0
    total = 0
    seen = set()
    for part in partitions:
        if part.device in seen:
            continue
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except (OSError, RuntimeError) as exc:
            logger.debug(f"Skipping {part.mountpoint}: {exc}")
            continue
        seen.add(part.device)
        total += usage.total // _MB
        used += (usage.total - usage.free) // _MB
    return Usage(used=used, total=total)


def sample_system_resources() -> SystemResources:
    """Take one point-in-time reading of CPU, memory and summed disk usage.

    Never raises: any reading the platform refuses degrades to zero."""
    return SystemResources(
        cpu_usage=_cpu_usage(),
        memory_usage=_memory_usage(),
        disk_usage=_disk_usage(),
    )
