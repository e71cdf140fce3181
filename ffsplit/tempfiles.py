"""
ffsplit.tempfiles - Scoped temporary files for engine runs.

A TempScope owns every temporary path allocated while one record is being
processed. Paths are deleted when the scope exits, whatever the exit path;
deletion problems are logged and never raised.
"""

from __future__ import annotations

import os
import tempfile
import time
import uuid
from pathlib import Path
from types import TracebackType

from ffsplit.exceptions import TempIOFailed
from ffsplit.logging import get_logger

logger = get_logger("tempfiles")


class TempScope:
    """Context manager handing out unique temp paths for one record.

    Names combine a millisecond timestamp, the process id, a random token,
    the record index and (for batch extraction) the segment index, so
    concurrent pipelines sharing a temp directory never collide.
    """

    def __init__(
        self,
        record_index: int,
        temp_dir: Path | None = None,
        prefix: str = "",
    ) -> None:
        self.record_index = record_index
        self.temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())
        self.prefix = prefix
        self._paths: list[Path] = []

    def __enter__(self) -> TempScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    @property
    def paths(self) -> list[Path]:
        """Paths allocated and not yet released."""
        return list(self._paths)

    def allocate(
        self,
        role: str,
        extension: str,
        segment_index: int | None = None,
    ) -> Path:
        """Reserve a unique path; nothing is created on disk yet."""
        parts = [
            f"{self.prefix}{role}",
            str(time.time_ns() // 1_000_000),
            str(os.getpid()),
            uuid.uuid4().hex[:8],
            str(self.record_index),
        ]
        if segment_index is not None:
            parts.append(str(segment_index))
        path = self.temp_dir / f"{'_'.join(parts)}.{extension}"
        self._paths.append(path)
        return path

    def write(self, path: Path, data: bytes) -> Path:
        """Write ``data`` to an allocated path.

        Raises:
            TempIOFailed: If the write fails
        """
        try:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise TempIOFailed(f"Could not write temporary file {path.name}: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path

    def read(self, path: Path) -> bytes:
        """Read an allocated path back into memory.

        Raises:
            TempIOFailed: If the read fails
        """
        try:
            return path.read_bytes()
        except OSError as e:
            raise TempIOFailed(f"Could not read temporary file {path.name}: {e}") from e

    def release(self, path: Path) -> None:
        """Delete one path early (best effort) and stop tracking it."""
        if path in self._paths:
            self._paths.remove(path)
        _remove_quietly(path)

    def cleanup(self) -> None:
        """Delete every path still owned by the scope."""
        while self._paths:
            _remove_quietly(self._paths.pop())


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove temporary file %s: %s", path, e)
    else:
        logger.debug("Removed %s", path)
