"""Filesystem capability used by the cache.

The cache never touches ``open``/``os`` directly; it goes through a
:class:`FileSystem` so tests can swap in :class:`InMemoryFileSystem`.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Protocol


class FileSystem(Protocol):
    def ensure_exists(self, path: str, initial: bytes) -> bool:
        """Create *path* with *initial* content if absent. Return ``True`` if created."""
        ...

    def read_all(self, path: str) -> bytes:
        ...

    def write_all(self, path: str, data: bytes) -> None:
        ...


class LocalFileSystem:
    """Real disk access."""

    def ensure_exists(self, path: str, initial: bytes) -> bool:
        try:
            # "x" fails instead of truncating when the file is already there.
            with open(path, "xb") as fh:
                fh.write(initial)
        except FileExistsError:
            return False
        return True

    def read_all(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def write_all(self, path: str, data: bytes) -> None:
        target = Path(path)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            # mkstemp creates 0600; keep whatever mode the existing file had.
            if target.exists():
                os.chmod(tmp_name, stat.S_IMODE(target.stat().st_mode))
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class InMemoryFileSystem:
    """Dict-backed filesystem for tests.

    Set :attr:`fail_writes` to make :meth:`write_all` raise
    ``PermissionError`` the way a read-only directory would.
    """

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})
        self.fail_writes = False
        self.writes = 0

    def ensure_exists(self, path: str, initial: bytes) -> bool:
        if path in self.files:
            return False
        self.files[path] = initial
        return True

    def read_all(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write_all(self, path: str, data: bytes) -> None:
        if self.fail_writes:
            raise PermissionError(f"write denied: {path}")
        self.files[path] = data
        self.writes += 1
