"""Process-external lock for iptables builds without --wait.

Older iptables has no internal concurrency guard, so two concurrent
invocations can corrupt a table. Every invocation then takes a
non-blocking exclusive flock on a well-known file, retrying a bounded
number of times. The file is created on demand and never deleted.
"""

import errno
import fcntl
import os
import time
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from iptctl.core.config import (
    DEFAULT_LOCK_PATH,
    DEFAULT_LOCK_RETRIES,
    DEFAULT_LOCK_RETRY_DELAY,
    LockConfig,
)
from iptctl.core.exceptions import LockError, LockTimeoutError
from iptctl.core.output import Console, console as default_console


class FileLock:
    """Exclusive flock on a shared lock file, acquired with bounded retry.

    Usage:
        lock = FileLock(Path("/var/run/xtables_old.lock"))
        with lock.acquire():
            # no other iptctl process on this host is running iptables
            ...
    """

    def __init__(
        self,
        path: Path = DEFAULT_LOCK_PATH,
        *,
        retries: int = DEFAULT_LOCK_RETRIES,
        retry_delay: float = DEFAULT_LOCK_RETRY_DELAY,
        console: Optional[Console] = None,
    ) -> None:
        """Initialize the lock handle. Nothing is opened until acquire().

        Args:
            path: Lock file shared by every invocation on the host
            retries: Extra attempts after the first one fails on contention
            retry_delay: Seconds to sleep between attempts (0 = spin)
            console: Console for contention messages
        """
        self.path = Path(path)
        self.retries = retries
        self.retry_delay = retry_delay
        self.console = console or default_console

    @classmethod
    def from_config(cls, config: LockConfig, console: Optional[Console] = None) -> "FileLock":
        return cls(
            config.path,
            retries=config.retries,
            retry_delay=config.retry_delay,
            console=console,
        )

    @property
    def attempts(self) -> int:
        """Total number of flock attempts before giving up."""
        return self.retries + 1

    def _open(self) -> int:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            return os.open(str(self.path), os.O_CREAT | os.O_WRONLY, 0o600)
        except OSError as e:
            raise LockError(
                f"Cannot open lock file {self.path}: {e.strerror or e}",
                path=str(self.path),
                hint="Run as root or point lock.path at a writable location",
            ) from e

    def _lock(self, fd: int) -> None:
        """Take the flock, retrying on contention only."""
        for attempt in range(1, self.attempts + 1):
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                return
            except OSError as e:
                if e.errno not in (errno.EAGAIN, errno.EWOULDBLOCK):
                    raise LockError(
                        f"flock on {self.path} failed: {e.strerror or e}",
                        path=str(self.path),
                    ) from e

            self.console.verbose(
                f"Lock {self.path} busy (attempt {attempt}/{self.attempts})"
            )
            if attempt < self.attempts and self.retry_delay > 0:
                time.sleep(self.retry_delay)

        raise LockTimeoutError(str(self.path), self.attempts)

    @contextmanager
    def acquire(self) -> Generator[None, None, None]:
        """Hold the lock for the duration of the block.

        Raises:
            LockTimeoutError: If every attempt found the lock held
            LockError: If the lock file cannot be opened or locked
        """
        fd = self._open()
        try:
            self._lock(fd)
            try:
                yield
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
