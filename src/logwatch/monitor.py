"""Run orchestration: detectors, disk check, then alert dispatch."""

import socket
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import schedule
import structlog

from logwatch.alerter import (
    AlertAggregator,
    AlertBatch,
    AlertDispatcher,
    AlertMessage,
    DispatchReport,
    EmailClient,
    SlackClient,
    Transport,
)
from logwatch.config import Config
from logwatch.detectors import (
    DetectionResult,
    DiskUsage,
    DiskUsageChecker,
    HttpErrorDetector,
    LogDetector,
    SshFailureDetector,
    probe_disk_usage,
)
from logwatch.errors import LockUnavailable, OffsetPersistError, SetupError
from logwatch.metrics import write_metrics
from logwatch.offsets import OffsetStore
from logwatch.reader import read_new
from logwatch.sources import MonitoredSource

log = structlog.get_logger()


@dataclass
class RunSummary:
    """Outcome of one monitoring pass."""

    results: dict[str, DetectionResult] = field(default_factory=dict)
    alerts: list[AlertMessage] = field(default_factory=list)
    report: DispatchReport | None = None
    skipped: list[str] = field(default_factory=list)  # Detector names

    @property
    def alert_count(self) -> int:
        return len(self.alerts)


def build_transports(config: Config) -> list[Transport]:
    """Create the transports enabled in config, email first."""
    transports: list[Transport] = []
    if config.email.enabled:
        transports.append(
            EmailClient(
                recipient=config.email.to,
                sender=config.email.sender,
                smtp_host=config.email.smtp_host,
                smtp_port=config.email.smtp_port,
                timeout=config.transport_timeout,
                starttls=config.email.starttls,
                username=config.email.username,
                password=config.email.password,
            )
        )
    if config.slack.enabled and config.slack.webhook_url:
        transports.append(SlackClient(config.slack.webhook_url, timeout=config.transport_timeout))
    return transports


class LogMonitor:
    """Runs every check once and sends whatever alerts they produced."""

    def __init__(
        self,
        config: Config,
        transports: list[Transport] | None = None,
        disk_probe: Callable[[], list[DiskUsage]] = probe_disk_usage,
        hostname: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the monitor.

        Args:
            config: Validated configuration
            transports: Alert channels (default: built from config)
            disk_probe: Source of filesystem usage figures
            hostname: Host name printed in alerts (default: socket.gethostname())
            clock: Returns the timestamp used for subjects and snapshot names
        """
        self.config = config
        self.offsets = OffsetStore(config.state_dir)
        self.transports = build_transports(config) if transports is None else transports
        self.dispatcher = AlertDispatcher(config.alerts_dir, self.transports)
        self.hostname = hostname or socket.gethostname()
        self.clock = clock

        self.ssh_detector = SshFailureDetector(
            threshold=config.ssh_fail_threshold, top_n=config.max_top_ips
        )
        self.http_detector = HttpErrorDetector(threshold=config.http_5xx_threshold)
        self.disk_checker = DiskUsageChecker(
            threshold=config.disk_usage_threshold, probe=disk_probe
        )

        self._stop_event = threading.Event()

    def prepare(self) -> None:
        """Create state, log and alert directories.

        Raises:
            SetupError: If any directory cannot be created
        """
        for directory in (self.config.state_dir, self.config.log_dir, self.config.alerts_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise SetupError(f"Cannot create directory {directory}: {e}") from e

    def _consume(self, source: MonitoredSource) -> list[str] | None:
        """Read new lines of source and advance its offset.

        Returns None if the source was skipped because another run holds it.
        """
        try:
            with self.offsets.lock(source.key):
                last = self.offsets.load(source.key)
                result = read_new(source.path, last)
                if result.rotated:
                    log.info(
                        "Log rotation detected, reading from the top",
                        path=str(source.path),
                        previous_offset=last,
                        lines=result.total_lines,
                    )
                try:
                    self.offsets.save(source.key, result.total_lines)
                except OffsetPersistError as e:
                    log.critical(
                        "Failed to persist offset, lines may be re-read next run",
                        path=str(source.path),
                        error=str(e),
                    )
        except LockUnavailable as e:
            log.warning(
                "Source locked by another run, skipping", path=str(source.path), error=str(e)
            )
            return None
        return result.lines

    def process_source(
        self,
        source: MonitoredSource,
        detector: LogDetector,
        aggregator: AlertAggregator,
    ) -> DetectionResult | None:
        """Feed the new lines of one log into its detector.

        Returns None if the source was skipped.
        """
        if not source.path.is_file():
            log.warning(
                "Log file not found, skipping", detector=detector.name, path=str(source.path)
            )
            return None

        lines = self._consume(source)
        if lines is None:
            return None
        if not lines:
            log.info("No new lines", detector=detector.name, path=str(source.path))
            return DetectionResult()

        result = detector.detect(lines)
        if result.threshold_breached:
            message = detector.build_alert(result, self.config.run_window_minutes)
            aggregator.add(message)
            log.warning("ALERT queued", detector=detector.name, summary=message.summary)
        elif result.count > 0:
            log.info(
                "Below threshold",
                detector=detector.name,
                count=result.count,
                threshold=detector.threshold,
            )
        return result

    def check_ssh_failures(self, aggregator: AlertAggregator) -> DetectionResult | None:
        source = MonitoredSource(self.config.ssh_auth_log, self.ssh_detector.kind)
        return self.process_source(source, self.ssh_detector, aggregator)

    def check_http_5xx(self, aggregator: AlertAggregator) -> DetectionResult | None:
        if not self.config.web_access_log:
            log.info("Web access log not configured, skipping HTTP 5xx check")
            return None
        source = MonitoredSource(self.config.web_access_log, self.http_detector.kind)
        return self.process_source(source, self.http_detector, aggregator)

    def check_disk_usage(self, aggregator: AlertAggregator) -> DetectionResult:
        overused = self.disk_checker.check()
        if overused:
            message = self.disk_checker.build_alert(overused)
            aggregator.add(message)
            log.warning("ALERT queued", detector=self.disk_checker.name, summary=message.summary)
        else:
            log.info("Disk usage OK", threshold=self.disk_checker.threshold)
        return DetectionResult(
            count=len(overused),
            breakdown=[(u.mountpoint, int(u.percent)) for u in overused],
            threshold_breached=bool(overused),
        )

    def run_once(self) -> RunSummary:
        """Run all checks in order and dispatch the resulting batch."""
        log.info("Log monitor run started")
        aggregator = AlertAggregator()
        summary = RunSummary()

        checks: list[tuple[str, Callable[[AlertAggregator], DetectionResult | None]]] = [
            (self.ssh_detector.name, self.check_ssh_failures),
            (self.http_detector.name, self.check_http_5xx),
            (self.disk_checker.name, self.check_disk_usage),
        ]
        for name, check in checks:
            try:
                result = check(aggregator)
            except Exception:
                log.exception("Check failed", detector=name)
                result = None
            if result is None:
                summary.skipped.append(name)
            else:
                summary.results[name] = result

        batch = AlertBatch(
            messages=aggregator.drain(),
            hostname=self.hostname,
            created_at=self.clock(),
            window_minutes=self.config.run_window_minutes,
        )
        summary.alerts = batch.messages
        summary.report = self.dispatcher.dispatch(batch)

        if self.config.metrics_textfile:
            write_metrics(self.config.metrics_textfile, summary)

        log.info("Log monitor run finished", alerts=summary.alert_count)
        return summary

    def send_test_alert(self) -> bool:
        """Send a test message through every enabled transport."""
        if not self.transports:
            log.error("No alert transports enabled")
            return False

        batch = AlertBatch(
            messages=[
                AlertMessage(
                    icon="✅",
                    summary="Test alert: logwatch is configured correctly.",
                    details=[f"Transports: {', '.join(t.name for t in self.transports)}"],
                )
            ],
            hostname=self.hostname,
            created_at=self.clock(),
            window_minutes=self.config.run_window_minutes,
        )
        results = self.dispatcher.send(batch.subject, batch.body)
        return all(results.values())

    def _run_safely(self) -> None:
        try:
            self.run_once()
        except Exception:
            log.exception("Monitor run failed")

    def watch(self, interval_minutes: int | None = None) -> None:
        """Run now and then every interval until stopped or interrupted."""
        interval = interval_minutes or self.config.run_window_minutes
        scheduler = schedule.Scheduler()
        scheduler.every(interval).minutes.do(self._run_safely)
        log.info("Watching", interval_minutes=interval)

        self._run_safely()
        try:
            while not self._stop_event.is_set():
                scheduler.run_pending()
                time.sleep(1)
        except KeyboardInterrupt:
            log.info("Received shutdown signal")
            self.stop()

    def stop(self) -> None:
        """Stop a running watch loop."""
        log.info("Stopping log monitor")
        self._stop_event.set()
