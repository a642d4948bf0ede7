"""
Advisory file lock adapter (POSIX ``flock``).

The lock is shared by every cooperating process that opens the same file.
Processes that do not take the lock are not prevented from touching the file.
"""

from __future__ import annotations

import fcntl
import logging
import time
from types import TracebackType
from typing import IO, Any

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.05


class FcntlFileLock:
    """
    Context manager holding an advisory lock on an open file.

    With ``timeout=None`` acquisition blocks until the lock is granted.
    With a timeout the lock is polled without blocking and ``TimeoutError``
    is raised once the deadline passes.
    """

    def __init__(
        self,
        fileobj: IO[Any],
        *,
        shared: bool = False,
        timeout: float | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._fileobj = fileobj
        self._mode = fcntl.LOCK_SH if shared else fcntl.LOCK_EX
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        fd = self._fileobj.fileno()

        if self._timeout is None:
            fcntl.flock(fd, self._mode)
            self._held = True
            return

        deadline = time.monotonic() + self._timeout
        while True:
            try:
                fcntl.flock(fd, self._mode | fcntl.LOCK_NB)
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise TimeoutError(
                        f"Timed out after {self._timeout}s waiting for file lock"
                    ) from None
                time.sleep(self._poll_interval)
            else:
                self._held = True
                return

    def release(self) -> None:
        if not self._held:
            return
        try:
            fcntl.flock(self._fileobj.fileno(), fcntl.LOCK_UN)
        finally:
            self._held = False

    def __enter__(self) -> FcntlFileLock:
        self.acquire()
        logger.debug(
            "Acquired %s lock on %s",
            "shared" if self._mode == fcntl.LOCK_SH else "exclusive",
            getattr(self._fileobj, "name", "<file>"),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
