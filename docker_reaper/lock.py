import fcntl
import logging
import os
from pathlib import Path

from .errors import LockHeldError, ReaperError

logger = logging.getLogger(__name__)


class InstanceLock:
    """
    Host-wide lock that keeps two docker-reaper runs from overlapping.

    The lock is an exclusive flock on a lock file. The kernel drops it when
    the descriptor is closed, so it also goes away if the process dies.
    Acquisition never waits: a held lock raises LockHeldError at once.

    Example:
        >>> with InstanceLock("/var/run/docker-reaper.lock"):
        ...     reaper.run_all()
    """

    def __init__(self, path):
        self.path = Path(path)
        self._fd = None

    @property
    def is_held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> "InstanceLock":
        if self._fd is not None:
            return self
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise ReaperError(f"Cannot open lock file {self.path}: {e}") from e
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            raise LockHeldError(self.path) from None
        except OSError:
            os.close(fd)
            raise
        try:
            os.ftruncate(fd, 0)
            os.write(fd, f"{os.getpid()}\n".encode())
        except OSError as e:
            os.close(fd)
            raise ReaperError(f"Cannot write lock file {self.path}: {e}") from e
        self._fd = fd
        logger.debug(f"Acquired lock {self.path}")
        return self

    def release(self):
        if self._fd is None:
            return
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None
        logger.debug(f"Released lock {self.path}")

    def __enter__(self):
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
