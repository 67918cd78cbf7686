"""Per-source line offsets persisted between runs."""

import fcntl
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from logwatch.errors import LockUnavailable, OffsetPersistError

log = structlog.get_logger()

STATE_SUFFIX = ".state"
LOCK_SUFFIX = ".lock"


class OffsetStore:
    """Stores one non-negative line count per source key.

    Each key lives in its own ``<key>.state`` file holding a single
    integer. Writes go through a temp file and ``os.replace`` so a crash
    leaves either the old or the new value.
    """

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)

    def _state_path(self, key: str) -> Path:
        return self.state_dir / f"{key}{STATE_SUFFIX}"

    def load(self, key: str) -> int:
        """Return the stored offset for key, or 0 if there is none."""
        path = self._state_path(key)
        try:
            raw = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return 0
        except OSError as e:
            log.warning("Cannot read offset, starting from 0", key=key, error=str(e))
            return 0

        try:
            value = int(raw)
        except ValueError:
            log.warning("Corrupt offset file, starting from 0", key=key, content=raw[:50])
            return 0
        if value < 0:
            log.warning("Negative offset on disk, starting from 0", key=key, value=value)
            return 0
        return value

    def save(self, key: str, offset: int) -> None:
        """Persist offset for key, replacing any previous value.

        Raises:
            ValueError: If offset is negative
            OffsetPersistError: If the value could not be written
        """
        if offset < 0:
            raise ValueError(f"Offset must be non-negative, got {offset}")

        target = self._state_path(key)
        try:
            fd, tmp = tempfile.mkstemp(
                dir=str(self.state_dir),
                prefix=f".{target.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise OffsetPersistError(f"Cannot write offset for {key}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(f"{offset}\n")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, target)
        except OSError as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise OffsetPersistError(f"Cannot write offset for {key}: {e}") from e

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """Hold an exclusive lock on key for the duration of the block.

        Never blocks: if another process holds the lock, LockUnavailable
        is raised immediately.
        """
        lock_path = self.state_dir / f"{key}{LOCK_SUFFIX}"
        try:
            fh = open(lock_path, "a")
        except OSError as e:
            raise LockUnavailable(f"Cannot open lock file {lock_path}: {e}") from e

        with fh:
            try:
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError as e:
                raise LockUnavailable(f"Source {key} is locked by another run") from e
            try:
                yield
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    def list_offsets(self) -> dict[str, int]:
        """Return all stored offsets keyed by source key."""
        if not self.state_dir.is_dir():
            return {}
        return {
            path.name[: -len(STATE_SUFFIX)]: self.load(path.name[: -len(STATE_SUFFIX)])
            for path in sorted(self.state_dir.glob(f"*{STATE_SUFFIX}"))
        }

    def reset(self, key: str) -> bool:
        """Forget the offset for key. Returns False if none was stored."""
        try:
            self._state_path(key).unlink()
        except FileNotFoundError:
            return False
        log.info("Offset reset", key=key)
        return True
