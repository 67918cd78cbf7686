"""HTTP 5xx spike detector for web server access logs."""

from logwatch.alerter.aggregator import AlertMessage
from logwatch.formats import AccessLogFormat
from logwatch.sources import SourceKind

from .base import DetectionResult, LogDetector, format_breakdown, rank_top

TOP_ENDPOINTS = 5


class HttpErrorDetector(LogDetector):
    """Counts 5xx responses and, on breach, ranks the failing endpoints."""

    kind = SourceKind.HTTP_ACCESS

    def __init__(
        self,
        threshold: int = 20,
        top_n: int = TOP_ENDPOINTS,
        log_format: AccessLogFormat | None = None,
    ):
        super().__init__(threshold, top_n)
        self.log_format = log_format or AccessLogFormat()

    @property
    def name(self) -> str:
        return "http_5xx"

    def _is_server_error(self, line: str) -> bool:
        code = self.log_format.extract_status_code(line)
        return code is not None and 500 <= code <= 599

    def detect(self, lines: list[str]) -> DetectionResult:
        errors = [line for line in lines if self._is_server_error(line)]
        count = len(errors)
        breached = count >= self.threshold
        if not breached:
            return DetectionResult(count=count)

        paths = (self.log_format.extract_request_path(line) for line in errors)
        return DetectionResult(
            count=count,
            breakdown=rank_top((p for p in paths if p is not None), self.top_n),
            threshold_breached=True,
        )

    def build_alert(self, result: DetectionResult, window_minutes: int) -> AlertMessage:
        return AlertMessage(
            icon="🔥",
            summary=f"HTTP 5xx spike: {result.count} errors in last ~{window_minutes} min.",
            heading="Top endpoints:",
            details=format_breakdown(result.breakdown),
        )
