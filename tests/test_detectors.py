"""Tests for the log detectors and disk checker."""

from conftest import access_line, ssh_accepted, ssh_failed, ssh_invalid_user, ssh_pam_failure

from logwatch.detectors import (
    DiskUsage,
    DiskUsageChecker,
    HttpErrorDetector,
    SshFailureDetector,
    format_breakdown,
    rank_top,
)
from logwatch.formats import AccessLogFormat, AuthLogFormat


class TestRankTop:
    """Tests for top-N ranking."""

    def test_ties_keep_first_seen_order(self):
        """Equal counts keep the order labels first appeared."""
        labels = ["A", "B", "C", "A", "B", "A", "B"]
        assert rank_top(labels, 5) == [("A", 3), ("B", 3), ("C", 1)]

    def test_tie_order_follows_input(self):
        """Tie order follows input, not label sort order."""
        labels = ["B", "A", "A", "B", "C"]
        assert rank_top(labels, 5) == [("B", 2), ("A", 2), ("C", 1)]

    def test_truncated(self):
        """Only the top N labels are kept."""
        labels = ["a"] * 4 + ["b"] * 3 + ["c"] * 2 + ["d"]
        assert rank_top(labels, 2) == [("a", 4), ("b", 3)]

    def test_empty(self):
        """No labels give an empty ranking."""
        assert rank_top([], 5) == []

    def test_format_breakdown(self):
        """Breakdown lines are count then label; empty shows none."""
        lines = format_breakdown([("10.0.0.1", 12), ("10.0.0.2", 3)])
        assert lines[0].split() == ["12", "10.0.0.1"]
        assert lines[1].split() == ["3", "10.0.0.2"]
        assert format_breakdown([]) == ["none"]


class TestAuthLogFormat:
    """Tests for auth.log parsing."""

    def test_markers(self):
        """Each failure marker is recognised; accepted logins are not."""
        fmt = AuthLogFormat()
        assert fmt.is_failure(ssh_failed("1.2.3.4"))
        assert fmt.is_failure(ssh_invalid_user("1.2.3.4"))
        assert fmt.is_failure(ssh_pam_failure())
        assert not fmt.is_failure(ssh_accepted("1.2.3.4"))

    def test_markers_case_sensitive(self):
        """Markers match case-sensitively."""
        assert not AuthLogFormat().is_failure("FAILED PASSWORD for root from 1.2.3.4")

    def test_extract_ip(self):
        """The IPv4 address after 'from' is extracted."""
        fmt = AuthLogFormat()
        assert fmt.extract_ip(ssh_failed("203.0.113.5")) == "203.0.113.5"
        assert fmt.extract_ip(ssh_pam_failure()) is None


class TestAccessLogFormat:
    """Tests for access log parsing."""

    def test_status_code(self):
        """The ninth field is read as the status code."""
        fmt = AccessLogFormat()
        assert fmt.extract_status_code(access_line(status=503)) == 503
        assert fmt.extract_status_code(access_line(status=200)) == 200

    def test_status_missing(self):
        """Short lines and non-numeric status fields give None."""
        fmt = AccessLogFormat()
        assert fmt.extract_status_code("garbage line") is None
        assert fmt.extract_status_code('1.1.1.1 - - [x +0] "GET / HTTP/1.1" abc 0') is None

    def test_status_non_ascii_digits(self):
        """Only ASCII digits form a status code."""
        line = access_line(status=500).replace(" 500 ", " ٥٠٠ ")
        assert AccessLogFormat().extract_status_code(line) is None

    def test_request_path(self):
        """The path is taken from the quoted request line."""
        fmt = AccessLogFormat()
        assert fmt.extract_request_path(access_line("/api/orders?id=3")) == "/api/orders?id=3"
        assert fmt.extract_request_path(access_line("/upload", method="POST")) == "/upload"
        assert fmt.extract_request_path('1.1.1.1 - - [x] "-" 400 0') is None


class TestSshFailureDetector:
    """Tests for the SSH failure detector."""

    def test_threshold_exactly_met(self):
        """A count equal to the threshold breaches it."""
        lines = [ssh_failed("10.0.0.1") for _ in range(5)]
        result = SshFailureDetector(threshold=5).detect(lines)
        assert result.count == 5
        assert result.threshold_breached is True

    def test_one_below_threshold(self):
        """One below the threshold does not breach."""
        lines = [ssh_failed("10.0.0.1") for _ in range(4)]
        result = SshFailureDetector(threshold=5).detect(lines)
        assert result.count == 4
        assert result.threshold_breached is False

    def test_counts_all_markers(self):
        """Every failure marker counts, other lines do not."""
        lines = [
            ssh_failed("10.0.0.1"),
            ssh_invalid_user("10.0.0.2"),
            ssh_pam_failure(),
            ssh_accepted("10.0.0.3"),
            "Oct 18 08:00:05 web01 CRON[99]: session opened for user root",
        ]
        result = SshFailureDetector(threshold=5).detect(lines)
        assert result.count == 3

    def test_line_without_ip_counts_but_not_ranked(self):
        """Failures without an IP count but are not ranked."""
        lines = [ssh_pam_failure(), ssh_pam_failure(), ssh_failed("10.0.0.9")]
        result = SshFailureDetector(threshold=2).detect(lines)
        assert result.count == 3
        assert result.breakdown == [("10.0.0.9", 1)]

    def test_accepted_logins_not_ranked(self):
        """Accepted logins never appear among top IPs."""
        lines = [ssh_failed("10.0.0.1"), ssh_accepted("10.0.0.2"), ssh_accepted("10.0.0.2")]
        result = SshFailureDetector(threshold=1).detect(lines)
        assert result.breakdown == [("10.0.0.1", 1)]

    def test_breakdown_ranking(self):
        """Top IPs are ranked by count with first-seen ties."""
        lines = [
            ssh_failed("10.0.0.1"),
            ssh_failed("10.0.0.2"),
            ssh_failed("10.0.0.1"),
            ssh_invalid_user("10.0.0.3"),
            ssh_failed("10.0.0.2"),
            ssh_failed("10.0.0.1"),
            ssh_failed("10.0.0.2"),
        ]
        result = SshFailureDetector(threshold=5).detect(lines)
        assert result.breakdown == [("10.0.0.1", 3), ("10.0.0.2", 3), ("10.0.0.3", 1)]

    def test_top_n(self):
        """The IP breakdown is capped at top_n."""
        lines = [ssh_failed(f"10.0.0.{i}") for i in range(1, 9)]
        result = SshFailureDetector(threshold=5, top_n=3).detect(lines)
        assert len(result.breakdown) == 3

    def test_no_failures(self):
        """No failures give an empty result."""
        result = SshFailureDetector().detect([ssh_accepted("10.0.0.1")])
        assert result.count == 0
        assert result.breakdown == []
        assert result.threshold_breached is False

    def test_alert_text(self):
        """The SSH alert carries the summary and top IPs."""
        detector = SshFailureDetector(threshold=2)
        result = detector.detect([ssh_failed("10.0.0.1"), ssh_failed("10.0.0.1")])
        text = detector.build_alert(result, window_minutes=5).render()
        assert text.startswith("🚨 SSH brute-force suspected: 2 failed logins in last ~5 min.")
        assert "Top IPs (count):" in text
        assert "2 10.0.0.1" in text


class TestHttpErrorDetector:
    """Tests for the HTTP 5xx detector."""

    def test_threshold_boundary(self):
        """The threshold is inclusive."""
        detector = HttpErrorDetector(threshold=10)
        assert detector.detect([access_line(status=500)] * 10).threshold_breached is True
        assert detector.detect([access_line(status=500)] * 9).threshold_breached is False

    def test_only_5xx_counted(self):
        """Only 500-599 statuses count."""
        lines = [
            access_line(status=200),
            access_line(status=404),
            access_line(status=500),
            access_line(status=599),
            access_line(status=502),
        ]
        assert HttpErrorDetector(threshold=1).detect(lines).count == 3

    def test_unparseable_lines_ignored(self):
        """Lines without a status field are ignored."""
        lines = ["", "not an access log line", access_line(status=503)]
        result = HttpErrorDetector(threshold=5).detect(lines)
        assert result.count == 1

    def test_non_ascii_status_not_counted(self):
        """Arabic-Indic digits in the status field are not a 5xx."""
        line = access_line(status=500).replace(" 500 ", " ٥٠٠ ")
        assert HttpErrorDetector(threshold=1).detect([line]).count == 0

    def test_breakdown_only_on_breach(self):
        """No endpoint breakdown below the threshold."""
        lines = [access_line("/api", status=500)] * 3
        assert HttpErrorDetector(threshold=5).detect(lines).breakdown == []

    def test_breakdown_ranks_failing_paths(self):
        """Endpoints are ranked from 5xx lines only."""
        lines = (
            [access_line("/checkout", status=502)] * 2
            + [access_line("/api/orders", status=500)] * 3
            + [access_line("/healthy", status=200)] * 10
        )
        result = HttpErrorDetector(threshold=5).detect(lines)
        assert result.count == 5
        assert result.breakdown == [("/api/orders", 3), ("/checkout", 2)]

    def test_top_five_endpoints(self):
        """At most five endpoints are listed."""
        lines = [access_line(f"/p{i}", status=500) for i in range(8)]
        result = HttpErrorDetector(threshold=1).detect(lines)
        assert len(result.breakdown) == 5

    def test_alert_text(self):
        """The HTTP alert carries the summary and top endpoints."""
        detector = HttpErrorDetector(threshold=1)
        result = detector.detect([access_line("/x", status=500)])
        text = detector.build_alert(result, window_minutes=10).render()
        assert text.startswith("🔥 HTTP 5xx spike: 1 errors in last ~10 min.")
        assert "Top endpoints:" in text
        assert "1 /x" in text


class TestDiskUsageChecker:
    """Tests for the disk usage checker."""

    def test_single_overused_entry(self):
        """Only filesystems at or over the threshold are reported."""
        usages = [
            DiskUsage("/dev/sda1", 91.0, "/"),
            DiskUsage("/dev/sdb1", 40.0, "/data"),
        ]
        checker = DiskUsageChecker(threshold=90, probe=lambda: usages)

        overused = checker.check()
        message = checker.build_alert(overused)

        assert overused == [usages[0]]
        assert message.details == ["/dev/sda1 (91%) on /"]

    def test_at_threshold_included(self):
        """Usage equal to the threshold is reported."""
        checker = DiskUsageChecker(threshold=90, probe=lambda: [DiskUsage("/dev/sda1", 90.0, "/")])
        assert len(checker.check()) == 1

    def test_below_threshold(self):
        """Usage just under the threshold is not reported."""
        checker = DiskUsageChecker(threshold=90, probe=lambda: [DiskUsage("/dev/sda1", 89.9, "/")])
        assert checker.check() == []

    def test_alert_lists_all(self):
        """The disk alert lists every overused filesystem."""
        usages = [DiskUsage("/dev/sda1", 95.5, "/"), DiskUsage("/dev/sdc1", 99.0, "/var")]
        checker = DiskUsageChecker(threshold=85, probe=lambda: usages)
        text = checker.build_alert(checker.check()).render()
        assert text.splitlines() == [
            "💽 Disk usage high (>=85%):",
            "/dev/sda1 (95.5%) on /",
            "/dev/sdc1 (99%) on /var",
        ]
