"""Incremental reading of append-only log files."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ReadResult:
    """Lines appended since the last offset and the offset to store next."""

    lines: list[str] = field(default_factory=list)
    total_lines: int = 0
    rotated: bool = False  # File shrank below the previous offset


def read_new(path: Path, last_offset: int) -> ReadResult:
    """Return the complete lines appended to path since last_offset.

    Only newline-terminated lines count, so a line still being written is
    left for the next run. If the file now holds fewer lines than
    last_offset it was rotated or truncated, and reading restarts from the
    first line.

    Args:
        path: Log file to read
        last_offset: Number of lines consumed by previous runs

    Returns:
        ReadResult with the new lines (1-indexed range last_offset+1..total)
        and the total line count to persist
    """
    last_offset = max(last_offset, 0)
    if not path.is_file():
        return ReadResult(total_lines=last_offset)

    lines: list[str] = []
    total = 0
    with open(path, encoding="utf-8", errors="replace", newline="\n") as f:
        for raw in f:
            if not raw.endswith("\n"):
                break
            if total >= last_offset:
                lines.append(raw.rstrip("\r\n"))
            total += 1

    if total < last_offset:
        # Rotated or truncated, restart from the top of the new file
        return ReadResult(lines=_read_all(path, total), total_lines=total, rotated=True)

    return ReadResult(lines=lines, total_lines=total)


def _read_all(path: Path, limit: int) -> list[str]:
    lines: list[str] = []
    with open(path, encoding="utf-8", errors="replace", newline="\n") as f:
        for raw in f:
            if len(lines) >= limit or not raw.endswith("\n"):
                break
            lines.append(raw.rstrip("\r\n"))
    return lines
