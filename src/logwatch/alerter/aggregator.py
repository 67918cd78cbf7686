"""Collects the alert messages produced during one run."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class AlertMessage:
    """One alert, rendered as a summary line followed by a detail block."""

    icon: str  # Category prefix, e.g. "🚨"
    summary: str  # One-line summary
    details: list[str] = field(default_factory=list)
    heading: str | None = None  # Optional label above the details

    @property
    def title(self) -> str:
        return f"{self.icon} {self.summary}"

    def render(self) -> str:
        lines = [self.title]
        if self.heading:
            lines.append(self.heading)
        lines.extend(self.details)
        return "\n".join(lines)


class AlertAggregator:
    """Ordered buffer of the messages raised during the current run.

    No deduplication: every add() ends up in the batch.
    """

    def __init__(self) -> None:
        self._messages: list[AlertMessage] = []

    def add(self, message: AlertMessage) -> None:
        self._messages.append(message)

    def is_empty(self) -> bool:
        return not self._messages

    def drain(self) -> list[AlertMessage]:
        """Return all queued messages and clear the buffer."""
        messages = self._messages
        self._messages = []
        return messages

    def __len__(self) -> int:
        return len(self._messages)


@dataclass
class AlertBatch:
    """All messages of one run plus the metadata printed around them."""

    messages: list[AlertMessage]
    hostname: str
    created_at: datetime
    window_minutes: int

    def __bool__(self) -> bool:
        return bool(self.messages)

    @property
    def subject(self) -> str:
        return f"Log Monitor Alerts ({self.hostname}) - {self.created_at:%Y-%m-%d %H:%M}"

    @property
    def body(self) -> str:
        header = f"⏱ Window ~ last {self.window_minutes} minutes\nHost: {self.hostname}\n\n"
        return header + "\n\n".join(m.render() for m in self.messages) + "\n"
