"""Base classes and result types for log detectors."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

from logwatch.alerter.aggregator import AlertMessage
from logwatch.sources import SourceKind


@dataclass
class DetectionResult:
    """Outcome of running one detector over a batch of lines."""

    count: int = 0
    breakdown: list[tuple[str, int]] = field(default_factory=list)  # (label, occurrences)
    threshold_breached: bool = False


def rank_top(labels: Iterable[str], limit: int) -> list[tuple[str, int]]:
    """Count labels and return the `limit` most frequent.

    Sorted by count descending; equal counts keep the order in which the
    labels were first seen.
    """
    counts: dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    ranked = sorted(counts.items(), key=lambda x: -x[1])
    return ranked[:limit]


def format_breakdown(breakdown: list[tuple[str, int]]) -> list[str]:
    """Render ranked pairs as right-aligned 'count label' lines."""
    if not breakdown:
        return ["none"]
    width = len(str(breakdown[0][1]))
    return [f"{count:>{width + 4}} {label}" for label, count in breakdown]


class LogDetector(ABC):
    """Base class for detectors fed with new lines from one log source."""

    kind: SourceKind

    def __init__(self, threshold: int, top_n: int = 5):
        self.threshold = threshold
        self.top_n = top_n

    @property
    @abstractmethod
    def name(self) -> str:
        """Detector identifier used in logs and metrics."""
        pass

    @abstractmethod
    def detect(self, lines: list[str]) -> DetectionResult:
        """Count matching lines and rank their labels."""
        pass

    @abstractmethod
    def build_alert(self, result: DetectionResult, window_minutes: int) -> AlertMessage:
        """Build the alert for a breached result."""
        pass
