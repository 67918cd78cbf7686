"""Detectors that turn new log lines and disk usage into alert signals."""

from .base import DetectionResult, LogDetector, format_breakdown, rank_top
from .disk import DiskUsage, DiskUsageChecker, probe_disk_usage
from .http import HttpErrorDetector
from .ssh import SshFailureDetector

__all__ = [
    # Base
    "DetectionResult",
    "LogDetector",
    "format_breakdown",
    "rank_top",
    # Log detectors
    "SshFailureDetector",
    "HttpErrorDetector",
    # Disk
    "DiskUsage",
    "DiskUsageChecker",
    "probe_disk_usage",
]
