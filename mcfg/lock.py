"""Advisory file lock that serialises mcfg processes."""

from __future__ import annotations

import fcntl
import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from mcfg.exitcode import IOFailureError, LockConflictError


class LockMode(str, Enum):
    """How the run lock is held."""

    SHARED = "shared"
    EXCLUSIVE = "exclusive"


@dataclass
class LockMetadata:
    """Who holds the exclusive lock."""

    pid: int
    started_at: str
    command: str
    mode: LockMode

    def to_dict(self) -> dict[str, Any]:
        return {
            "pid": self.pid,
            "started_at": self.started_at,
            "command": self.command,
            "mode": self.mode.value,
        }

    @classmethod
    def _from_json(cls, data: bytes) -> LockMetadata | None:
        try:
            payload = json.loads(data)
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        pid = payload.get("pid")
        if isinstance(pid, bool) or not isinstance(pid, int) or pid == 0:
            return None
        started_at = payload.get("started_at")
        command = payload.get("command")
        try:
            mode = LockMode(payload.get("mode"))
        except ValueError:
            mode = LockMode.SHARED
        return cls(
            pid=pid,
            started_at=started_at if isinstance(started_at, str) else "",
            command=command if isinstance(command, str) else "",
            mode=mode,
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class LockHandle:
    """A lock that was acquired; release it or use it as a context manager."""

    def __init__(self, fd: int, manager: LockManager, mode: LockMode) -> None:
        self._fd: int | None = fd
        self._manager = manager
        self.mode = mode

    def release(self) -> None:
        """Release the lock and remove the holder metadata of an exclusive lock."""
        if self._fd is None:
            return
        if self.mode is LockMode.EXCLUSIVE:
            try:
                self._manager.meta_path.unlink()
            except OSError:
                pass
        fd, self._fd = self._fd, None
        try:
            os.close(fd)
        except OSError as error:
            raise IOFailureError(f"close lock file: {error}") from error

    def __enter__(self) -> LockHandle:
        return self

    def __exit__(self, *args: object) -> None:
        self.release()


class LockManager:
    """Acquires the run lock stored at ``path``."""

    def __init__(self, path: str | os.PathLike[str], now: Callable[[], datetime] | None = None) -> None:
        self.path = Path(path)
        self.meta_path = Path(str(self.path) + ".meta")
        self._now = now or _utc_now

    def acquire(self, mode: LockMode, command: str) -> LockHandle:
        """Take the lock without waiting; raise LockConflictError if it is held."""
        mode = LockMode(mode)
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as error:
            raise IOFailureError(f"create lock directory: {error}") from error
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_RDWR, 0o600)
        except OSError as error:
            raise IOFailureError(f"open lock file: {error}") from error

        flag = fcntl.LOCK_NB | (fcntl.LOCK_EX if mode is LockMode.EXCLUSIVE else fcntl.LOCK_SH)
        try:
            fcntl.flock(fd, flag)
        except BlockingIOError:
            os.close(fd)
            raise self._conflict_error() from None
        except OSError as error:
            os.close(fd)
            raise IOFailureError(f"acquire lock: {error}") from error

        handle = LockHandle(fd, self, mode)
        if mode is LockMode.EXCLUSIVE:
            metadata = LockMetadata(
                pid=os.getpid(),
                started_at=_rfc3339(self._now()),
                command=command.strip(),
                mode=mode,
            )
            try:
                self._write_metadata(fd, metadata)
            except IOFailureError:
                handle.release()
                raise
        else:
            try:
                self.meta_path.unlink()
            except OSError:
                pass
        return handle

    def _write_metadata(self, fd: int, metadata: LockMetadata) -> None:
        data = json.dumps(metadata.to_dict(), separators=(",", ":")).encode()
        steps: list[tuple[str, Callable[[], object]]] = [
            ("truncate lock file", lambda: os.ftruncate(fd, 0)),
            ("seek lock file", lambda: os.lseek(fd, 0, os.SEEK_SET)),
            ("write lock metadata", lambda: os.write(fd, data)),
            ("sync lock file", lambda: os.fsync(fd)),
            ("write lock meta file", lambda: self._write_meta_file(data)),
        ]
        for what, step in steps:
            try:
                step()
            except OSError as error:
                raise IOFailureError(f"{what}: {error}") from error

    def _write_meta_file(self, data: bytes) -> None:
        meta_fd = os.open(self.meta_path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o600)
        try:
            os.write(meta_fd, data)
        finally:
            os.close(meta_fd)

    def _read_metadata(self) -> LockMetadata | None:
        for path in (self.meta_path, self.path):
            try:
                data = path.read_bytes()
            except OSError:
                continue
            if not data:
                continue
            metadata = LockMetadata._from_json(data)
            if metadata is not None:
                return metadata
        return None

    def _conflict_error(self) -> LockConflictError:
        metadata = self._read_metadata()
        if metadata is not None and metadata.mode is LockMode.EXCLUSIVE:
            advice = "close the existing TUI or wait for the running command to finish"
            if metadata.command and "tui" not in metadata.command:
                advice = "wait for the running command to finish"
            return LockConflictError(
                f"mcfg is locked by pid {metadata.pid} started at {metadata.started_at} "
                f"({metadata.command}); {advice}"
            )
        return LockConflictError("mcfg is locked by another read-only command; wait for it to finish")