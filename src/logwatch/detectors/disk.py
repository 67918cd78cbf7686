"""Disk usage checker.

Unlike the log detectors this keeps no state between runs: every run
looks at the current usage of all mounted filesystems.
"""

from collections.abc import Callable
from typing import NamedTuple

import psutil
import structlog

from logwatch.alerter.aggregator import AlertMessage

log = structlog.get_logger()


class DiskUsage(NamedTuple):
    """Usage of one mounted filesystem."""

    device: str
    percent: float
    mountpoint: str


def probe_disk_usage() -> list[DiskUsage]:
    """Return usage for every mounted physical filesystem."""
    usages = []
    for part in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError as e:
            # Unreadable or vanished mount points (e.g. removable media)
            log.debug("Skipping mount", mountpoint=part.mountpoint, error=str(e))
            continue
        usages.append(DiskUsage(part.device, usage.percent, part.mountpoint))
    return usages


class DiskUsageChecker:
    """Flags filesystems at or above a usage percentage."""

    name = "disk_usage"

    def __init__(
        self,
        threshold: int = 85,
        probe: Callable[[], list[DiskUsage]] = probe_disk_usage,
    ):
        self.threshold = threshold
        self.probe = probe

    def check(self) -> list[DiskUsage]:
        """Return the filesystems whose usage is >= threshold."""
        return [u for u in self.probe() if u.percent >= self.threshold]

    def build_alert(self, overused: list[DiskUsage]) -> AlertMessage:
        return AlertMessage(
            icon="💽",
            summary=f"Disk usage high (>={self.threshold}%):",
            details=[f"{u.device} ({u.percent:g}%) on {u.mountpoint}" for u in overused],
        )
