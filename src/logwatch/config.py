"""Configuration loading for logwatch."""

import os
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from logwatch.errors import ConfigError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def parse_bool(value: Any) -> bool:
    """Parse a shell-style boolean toggle ("1", "true", "off", ...)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"Invalid boolean value: {value!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return parse_bool(raw)


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return Path(raw) if raw.strip() else None


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping")
    return value


@dataclass
class EmailConfig:
    """SMTP email transport configuration."""

    enabled: bool = True
    to: str = "admin@example.com"
    sender: str = field(default_factory=lambda: f"logwatch@{socket.gethostname()}")
    smtp_host: str = "localhost"
    smtp_port: int = 25
    username: str | None = None
    password: str | None = None
    starttls: bool = False


@dataclass
class SlackConfig:
    """Chat webhook transport configuration."""

    enabled: bool = False
    webhook_url: str | None = None


@dataclass
class Config:
    """Application configuration."""

    ssh_fail_threshold: int = 5
    http_5xx_threshold: int = 20
    disk_usage_threshold: int = 85
    run_window_minutes: int = 5
    max_top_ips: int = 5
    ssh_auth_log: Path = Path("/var/log/auth.log")
    web_access_log: Path | None = Path("/var/log/nginx/access.log")
    email: EmailConfig = field(default_factory=EmailConfig)
    slack: SlackConfig = field(default_factory=SlackConfig)
    transport_timeout: float = 10.0
    state_dir: Path = Path(".state")
    log_dir: Path = Path("logs")
    alerts_dir: Path = Path("alerts")
    metrics_textfile: Path | None = None
    log_level: str = "INFO"

    @property
    def log_file(self) -> Path:
        """Operational log path."""
        return self.log_dir / "logwatch.log"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()
        config._apply_env()
        return config

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from YAML file, then apply env var overrides.

        Environment variables win over values from the file.
        """
        config = cls()

        if path.exists():
            with open(path) as f:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ConfigError(f"{path}: invalid YAML: {e}") from e
            if data is not None and not isinstance(data, dict):
                raise ConfigError(f"{path}: top level must be a mapping")
            if data:
                try:
                    config._apply_mapping(data)
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"{path}: {e}") from e

        config._apply_env()
        return config

    def _apply_mapping(self, data: dict[str, Any]) -> None:
        thresholds = _section(data, "thresholds")
        self.ssh_fail_threshold = int(thresholds.get("ssh_fail", self.ssh_fail_threshold))
        self.http_5xx_threshold = int(thresholds.get("http_5xx", self.http_5xx_threshold))
        self.disk_usage_threshold = int(thresholds.get("disk_usage", self.disk_usage_threshold))

        self.run_window_minutes = int(data.get("run_window_minutes", self.run_window_minutes))
        self.max_top_ips = int(data.get("max_top_ips", self.max_top_ips))
        self.transport_timeout = float(data.get("transport_timeout", self.transport_timeout))
        self.log_level = str(data.get("log_level", self.log_level))
        if "metrics_textfile" in data:
            raw = data["metrics_textfile"]
            self.metrics_textfile = Path(raw) if raw else None

        sources = _section(data, "sources")
        if sources.get("ssh_auth_log"):
            self.ssh_auth_log = Path(sources["ssh_auth_log"])
        if "web_access_log" in sources:
            raw = sources["web_access_log"]
            self.web_access_log = Path(raw) if raw else None

        paths = _section(data, "paths")
        self.state_dir = Path(paths.get("state_dir", self.state_dir))
        self.log_dir = Path(paths.get("log_dir", self.log_dir))
        self.alerts_dir = Path(paths.get("alerts_dir", self.alerts_dir))

        email = _section(data, "email")
        self.email = EmailConfig(
            enabled=parse_bool(email.get("enabled", self.email.enabled)),
            to=email.get("to", self.email.to),
            sender=email.get("from", self.email.sender),
            smtp_host=email.get("smtp_host", self.email.smtp_host),
            smtp_port=int(email.get("smtp_port", self.email.smtp_port)),
            username=email.get("username", self.email.username),
            password=email.get("password", self.email.password),
            starttls=parse_bool(email.get("starttls", self.email.starttls)),
        )

        slack = _section(data, "slack")
        self.slack = SlackConfig(
            enabled=parse_bool(slack.get("enabled", self.slack.enabled)),
            webhook_url=slack.get("webhook_url", self.slack.webhook_url),
        )

    def _apply_env(self) -> None:
        self.ssh_fail_threshold = _env_int("SSH_FAIL_THRESHOLD", self.ssh_fail_threshold)
        self.http_5xx_threshold = _env_int("HTTP_5XX_THRESHOLD", self.http_5xx_threshold)
        self.disk_usage_threshold = _env_int("DISK_USAGE_THRESHOLD", self.disk_usage_threshold)
        self.run_window_minutes = _env_int("RUN_WINDOW_MINUTES", self.run_window_minutes)
        self.max_top_ips = _env_int("MAX_TOP_IPS", self.max_top_ips)
        self.transport_timeout = _env_float("TRANSPORT_TIMEOUT", self.transport_timeout)
        self.ssh_auth_log = _env_path("SSH_AUTH_LOG", self.ssh_auth_log) or self.ssh_auth_log
        self.web_access_log = _env_path("WEB_ACCESS_LOG", self.web_access_log)
        self.state_dir = _env_path("STATE_DIR", self.state_dir) or self.state_dir
        self.log_dir = _env_path("LOG_DIR", self.log_dir) or self.log_dir
        self.alerts_dir = _env_path("ALERTS_DIR", self.alerts_dir) or self.alerts_dir
        self.metrics_textfile = _env_path("METRICS_TEXTFILE", self.metrics_textfile)
        self.log_level = os.environ.get("LOG_LEVEL", self.log_level)

        self.email.enabled = _env_bool("ALERT_EMAIL", self.email.enabled)
        self.email.to = os.environ.get("EMAIL_TO", self.email.to)
        self.email.sender = os.environ.get("EMAIL_FROM", self.email.sender)
        self.email.smtp_host = os.environ.get("SMTP_HOST", self.email.smtp_host)
        self.email.smtp_port = _env_int("SMTP_PORT", self.email.smtp_port)
        self.email.username = os.environ.get("SMTP_USER") or self.email.username
        self.email.password = os.environ.get("SMTP_PASSWORD") or self.email.password
        self.email.starttls = _env_bool("SMTP_STARTTLS", self.email.starttls)

        self.slack.enabled = _env_bool("ALERT_SLACK", self.slack.enabled)
        self.slack.webhook_url = os.environ.get("SLACK_WEBHOOK_URL") or self.slack.webhook_url

    def validate(self) -> None:
        """Check value ranges and transport settings.

        Raises:
            ConfigError: On the first invalid setting found
        """
        for name in (
            "ssh_fail_threshold",
            "http_5xx_threshold",
            "run_window_minutes",
            "max_top_ips",
        ):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1, got {getattr(self, name)}")
        if not 1 <= self.disk_usage_threshold <= 100:
            raise ConfigError(
                f"disk_usage_threshold must be between 1 and 100, got {self.disk_usage_threshold}"
            )
        if self.transport_timeout <= 0:
            raise ConfigError(f"transport_timeout must be positive, got {self.transport_timeout}")
        if self.email.enabled and not self.email.to:
            raise ConfigError("Email alerts enabled but no recipient set (EMAIL_TO)")
        if self.slack.enabled and not self.slack.webhook_url:
            raise ConfigError("Slack alerts enabled but SLACK_WEBHOOK_URL is not set")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Unknown log level: {self.log_level}")
