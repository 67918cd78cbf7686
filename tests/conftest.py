"""Shared fixtures for logwatch tests."""

import logging
from pathlib import Path

import pytest
import structlog

from logwatch.config import Config, EmailConfig, SlackConfig

CONFIG_ENV_VARS = (
    "SSH_FAIL_THRESHOLD",
    "HTTP_5XX_THRESHOLD",
    "DISK_USAGE_THRESHOLD",
    "RUN_WINDOW_MINUTES",
    "MAX_TOP_IPS",
    "SSH_AUTH_LOG",
    "WEB_ACCESS_LOG",
    "ALERT_EMAIL",
    "EMAIL_TO",
    "EMAIL_FROM",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASSWORD",
    "SMTP_STARTTLS",
    "ALERT_SLACK",
    "SLACK_WEBHOOK_URL",
    "TRANSPORT_TIMEOUT",
    "STATE_DIR",
    "LOG_DIR",
    "ALERTS_DIR",
    "METRICS_TEXTFILE",
    "LOG_LEVEL",
    "LOGWATCH_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host environment out of config loading."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() calls made by a test."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


# ── Sample log lines ────────────────────────────────────────────────────


def ssh_failed(ip: str, user: str = "root") -> str:
    return f"Oct 18 08:00:01 web01 sshd[1234]: Failed password for {user} from {ip} port 51234 ssh2"


def ssh_invalid_user(ip: str, user: str = "admin") -> str:
    return f"Oct 18 08:00:02 web01 sshd[1235]: Invalid user {user} from {ip} port 4242"


def ssh_pam_failure() -> str:
    return (
        "Oct 18 08:00:03 web01 sshd[1236]: pam_unix(sshd:auth): authentication failure; "
        "logname= uid=0 euid=0 tty=ssh ruser= rhost=192.0.2.1"
    )


def ssh_accepted(ip: str) -> str:
    return f"Oct 18 08:00:04 web01 sshd[1237]: Accepted publickey for deploy from {ip} port 5555 ssh2"


def access_line(path: str = "/", status: int = 200, method: str = "GET") -> str:
    return (
        f'203.0.113.9 - - [18/Oct/2026:08:00:00 +0000] "{method} {path} HTTP/1.1" '
        f'{status} 173 "-" "curl/8.0"'
    )


def append_lines(path: Path, lines: list[str]) -> None:
    with open(path, "a", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


# ── Transports ──────────────────────────────────────────────────────────


class RecordingTransport:
    """Transport double that records calls."""

    def __init__(self, name: str = "fake", ok: bool = True, error: Exception | None = None):
        self.name = name
        self.ok = ok
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def send(self, subject: str, body: str) -> bool:
        self.calls.append((subject, body))
        if self.error is not None:
            raise self.error
        return self.ok


# ── Config ──────────────────────────────────────────────────────────────


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config rooted in tmp_path with both transports disabled."""
    logs = tmp_path / "var"
    logs.mkdir()
    return Config(
        ssh_fail_threshold=5,
        http_5xx_threshold=10,
        disk_usage_threshold=90,
        run_window_minutes=5,
        max_top_ips=5,
        ssh_auth_log=logs / "auth.log",
        web_access_log=logs / "access.log",
        email=EmailConfig(enabled=False, sender="logwatch@test"),
        slack=SlackConfig(enabled=False),
        state_dir=tmp_path / ".state",
        log_dir=tmp_path / "logs",
        alerts_dir=tmp_path / "alerts",
    )
