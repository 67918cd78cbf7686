"""Failed SSH login detector for auth.log."""

from logwatch.alerter.aggregator import AlertMessage
from logwatch.formats import AuthLogFormat
from logwatch.sources import SourceKind

from .base import DetectionResult, LogDetector, format_breakdown, rank_top


class SshFailureDetector(LogDetector):
    """Counts failed authentication lines and ranks the source IPs."""

    kind = SourceKind.SSH_AUTH

    def __init__(
        self,
        threshold: int = 5,
        top_n: int = 5,
        log_format: AuthLogFormat | None = None,
    ):
        super().__init__(threshold, top_n)
        self.log_format = log_format or AuthLogFormat()

    @property
    def name(self) -> str:
        return "ssh_failures"

    def detect(self, lines: list[str]) -> DetectionResult:
        failures = [line for line in lines if self.log_format.is_failure(line)]
        count = len(failures)
        if count == 0:
            return DetectionResult()

        # Lines without an address still count, they just have no label
        ips = (self.log_format.extract_ip(line) for line in failures)
        breakdown = rank_top((ip for ip in ips if ip is not None), self.top_n)

        return DetectionResult(
            count=count,
            breakdown=breakdown,
            threshold_breached=count >= self.threshold,
        )

    def build_alert(self, result: DetectionResult, window_minutes: int) -> AlertMessage:
        return AlertMessage(
            icon="🚨",
            summary=(
                f"SSH brute-force suspected: {result.count} failed logins "
                f"in last ~{window_minutes} min."
            ),
            heading="Top IPs (count):",
            details=format_breakdown(result.breakdown),
        )
