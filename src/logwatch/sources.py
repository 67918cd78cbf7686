"""Monitored log sources and their offset keys."""

import hashlib
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class SourceKind(Enum):
    """Log layouts understood by the detectors."""

    SSH_AUTH = "ssh_auth"
    HTTP_ACCESS = "http_access"


def offset_key(path: str | Path) -> str:
    """Derive the offset key for a log path.

    The key is the sanitized basename followed by a short hash of the
    normalized absolute path, so /var/log/a/access.log and
    /var/log/b/access.log never share an offset.
    """
    normalized = os.path.normpath(os.path.abspath(os.fspath(path)))
    base = _UNSAFE.sub("_", os.path.basename(normalized)).strip("._") or "root"
    digest = hashlib.sha1(normalized.encode("utf-8")).hexdigest()[:12]
    return f"{base}-{digest}"


@dataclass(frozen=True)
class MonitoredSource:
    """A log file watched by one detector."""

    path: Path
    kind: SourceKind
    key: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", offset_key(self.path))
