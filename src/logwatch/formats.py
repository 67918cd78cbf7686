"""Line parsers for the log layouts the detectors understand.

Each parser exposes small extraction methods that return None when a line
does not carry the wanted field, so detectors never deal with regexes.
"""

import re
from dataclasses import dataclass

# Phrases sshd and PAM write for a rejected login attempt
AUTH_FAILURE_MARKERS: tuple[str, ...] = (
    "Failed password",
    "Invalid user",
    "authentication failure",
)

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD")


@dataclass(frozen=True)
class AuthLogFormat:
    """Parse syslog-style auth.log lines written by sshd and PAM."""

    markers: tuple[str, ...] = AUTH_FAILURE_MARKERS

    _ip_re = re.compile(r"\bfrom ((?:\d{1,3}\.){3}\d{1,3})\b")

    def is_failure(self, line: str) -> bool:
        """True if the line records a failed authentication attempt."""
        return any(marker in line for marker in self.markers)

    def extract_ip(self, line: str) -> str | None:
        """Return the IPv4 address after 'from ', if present."""
        m = self._ip_re.search(line)
        return m.group(1) if m else None


@dataclass(frozen=True)
class AccessLogFormat:
    """Parse Apache/Nginx access logs (Common/Combined format).

    The status code is the ninth whitespace-separated field:

        1.2.3.4 - - [10/Oct/2025:13:55:36 +0000] "GET /x HTTP/1.1" 502 512
    """

    status_field: int = 8

    _status_re = re.compile(r"^[0-9]{3}$")
    _request_re = re.compile(r'"(?:' + "|".join(HTTP_METHODS) + r") ([^ \"]+)")

    def extract_status_code(self, line: str) -> int | None:
        """Return the HTTP status code, or None if the field is missing."""
        fields = line.split()
        if len(fields) <= self.status_field:
            return None
        code = fields[self.status_field]
        if not self._status_re.match(code):
            return None
        return int(code)

    def extract_request_path(self, line: str) -> str | None:
        """Return the path from the quoted request line, if present."""
        m = self._request_re.search(line)
        return m.group(1) if m else None
