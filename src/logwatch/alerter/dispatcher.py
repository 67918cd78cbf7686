"""Alert dispatch: snapshot to disk, then fan out to every transport."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import structlog

from .aggregator import AlertBatch

log = structlog.get_logger()


class Transport(Protocol):
    """An outbound notification channel."""

    name: str

    def send(self, subject: str, body: str) -> bool: ...


@dataclass
class DispatchReport:
    """What happened to one alert batch."""

    snapshot_path: Path | None
    results: dict[str, bool] = field(default_factory=dict)  # transport name -> success

    @property
    def all_sent(self) -> bool:
        return all(self.results.values())


class AlertDispatcher:
    """Renders a batch, stores a snapshot and hands it to each transport."""

    def __init__(self, alerts_dir: Path, transports: list[Transport] | None = None):
        self.alerts_dir = Path(alerts_dir)
        self.transports = transports or []

    def snapshot_path(self, batch: AlertBatch) -> Path:
        return self.alerts_dir / f"alert_{batch.created_at:%Y%m%d_%H%M%S}.txt"

    def write_snapshot(self, batch: AlertBatch) -> Path | None:
        """Write subject and body to a new timestamped file.

        Existing snapshots are never overwritten; a second batch within the
        same second is logged and not persisted.
        """
        path = self.snapshot_path(batch)
        try:
            with open(path, "x", encoding="utf-8") as f:
                f.write(f"{batch.subject}\n\n{batch.body}")
        except FileExistsError:
            log.warning("Alert snapshot already exists, not overwriting", path=str(path))
            return None
        except OSError as e:
            log.error("Failed to write alert snapshot", path=str(path), error=str(e))
            return None
        log.info("Alert saved", path=str(path))
        return path

    def send(self, subject: str, body: str) -> dict[str, bool]:
        """Call every transport; one failing never stops the next."""
        results: dict[str, bool] = {}
        for transport in self.transports:
            try:
                ok = bool(transport.send(subject, body))
            except Exception:
                log.exception("Transport raised", transport=transport.name)
                ok = False
            if not ok:
                log.error("Alert delivery failed", transport=transport.name)
            results[transport.name] = ok
        return results

    def dispatch(self, batch: AlertBatch) -> DispatchReport | None:
        """Deliver a batch. Returns None without side effects if it is empty."""
        if not batch:
            log.info("No alerts generated this run")
            return None

        snapshot = self.write_snapshot(batch)
        results = self.send(batch.subject, batch.body)
        return DispatchReport(snapshot_path=snapshot, results=results)
