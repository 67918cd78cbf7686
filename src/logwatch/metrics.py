"""Prometheus metrics for a logwatch run.

logwatch is short-lived, so metrics are not served over HTTP. Instead each
run can write a text-format file for node_exporter's textfile collector:

    METRICS_TEXTFILE=/var/lib/node_exporter/textfile/logwatch.prom

A fresh registry is built for every run.
All metrics use the 'logwatch_' prefix.
"""

import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from prometheus_client import CollectorRegistry, Gauge, write_to_textfile

if TYPE_CHECKING:
    from logwatch.monitor import RunSummary

log = structlog.get_logger()


def build_registry(summary: "RunSummary") -> CollectorRegistry:
    """Build a registry holding the figures of one run."""
    registry = CollectorRegistry()

    detection_count = Gauge(
        "logwatch_detection_count",
        "Matching lines (or overused filesystems) found in the last run",
        ["detector"],
        registry=registry,
    )
    breached = Gauge(
        "logwatch_threshold_breached",
        "1 if the detector breached its threshold in the last run",
        ["detector"],
        registry=registry,
    )
    alerts = Gauge(
        "logwatch_alerts",
        "Alert messages produced by the last run",
        registry=registry,
    )
    transport_success = Gauge(
        "logwatch_transport_success",
        "1 if the transport delivered the last alert batch",
        ["transport"],
        registry=registry,
    )
    skipped = Gauge(
        "logwatch_sources_skipped",
        "Sources skipped in the last run (missing, disabled or locked)",
        registry=registry,
    )
    last_run = Gauge(
        "logwatch_last_run_timestamp_seconds",
        "Unix time the last run finished",
        registry=registry,
    )

    for name, result in summary.results.items():
        detection_count.labels(detector=name).set(result.count)
        breached.labels(detector=name).set(1 if result.threshold_breached else 0)
    alerts.set(summary.alert_count)
    if summary.report is not None:
        for transport, ok in summary.report.results.items():
            transport_success.labels(transport=transport).set(1 if ok else 0)
    skipped.set(len(summary.skipped))
    last_run.set(time.time())

    return registry


def write_metrics(path: Path, summary: "RunSummary") -> bool:
    """Write run metrics to path. Failures are logged, never raised."""
    try:
        write_to_textfile(str(path), build_registry(summary))
    except OSError as e:
        log.error("Failed to write metrics file", path=str(path), error=str(e))
        return False
    log.debug("Metrics written", path=str(path))
    return True
