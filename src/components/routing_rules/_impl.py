"""
RoutingRulesStore - file-backed persistence for routing rules.

The rules live in a single YAML document stream shared by every thread and
process that routes queries. The store reads the whole stream on every call
and never caches between calls.

Key behaviors:
- list_rules() reads under a shared advisory lock
- update_by_name() serialises in-process on a thread lock, then across
  processes on an exclusive advisory lock, and rewrites the file in full
- New content is composed in memory, space for it is reserved, and the
  original bytes are restored if the write fails
- Parse failures abort before any write, leaving the file untouched
"""

from __future__ import annotations

import errno
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any

import yaml
from pydantic import ValidationError

from .adapters.file_lock import FcntlFileLock
from .adapters.yaml_stream import default_codec
from .errors import RulesIOError, RulesLockTimeoutError, RulesParseError
from .models import RoutingRule
from .ports import FileLockFactory, RuleCodecPort

logger = logging.getLogger(__name__)


def replace_by_name(
    rules: list[RoutingRule], updated: RoutingRule
) -> tuple[list[RoutingRule], int]:
    """
    Substitute every rule named ``updated.name``.

    Order and count are preserved. Returns the new list and how many
    elements were replaced (zero on a miss).
    """
    result: list[RoutingRule] = []
    matched = 0
    for rule in rules:
        if rule.name == updated.name:
            result.append(updated)
            matched += 1
        else:
            result.append(rule)
    return result, matched


class RoutingRulesStore:
    """
    Routing rules store bound to one file.

    Each instance owns its path and its thread lock, so independent stores
    pointing at different files never contend.
    """

    def __init__(
        self,
        rules_path: Path | str,
        *,
        codec: RuleCodecPort | None = None,
        lock_factory: FileLockFactory | Callable[..., Any] | None = None,
        lock_timeout: float | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            rules_path: Path of the YAML document stream holding the rules
            codec: Document stream codec (YAML by default)
            lock_factory: Advisory lock factory (``flock`` by default)
            lock_timeout: Seconds to wait for the file lock; None blocks forever
        """
        self._path = Path(rules_path)
        self._codec = codec or default_codec
        self._lock_factory = lock_factory or FcntlFileLock
        self._lock_timeout = lock_timeout
        self._update_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # --- Public operations ---

    def list_rules(self) -> list[RoutingRule]:
        """
        Read every rule in file order.

        Raises:
            RulesIOError: If the file cannot be opened, read or locked.
            RulesParseError: If any document is malformed.
        """
        try:
            with open(self._path, "rb") as f:
                with self._lock(f, shared=True):
                    raw = f.read()
        except OSError as e:
            raise RulesIOError(self._path, str(e)) from e

        rules = self._parse(self._decode(raw))
        logger.debug("Read %d routing rules from %s", len(rules), self._path)
        return rules

    def update_by_name(self, updated: RoutingRule) -> list[RoutingRule]:
        """
        Replace the rule(s) named ``updated.name`` and rewrite the file.

        A name with no match leaves the rule set unchanged and still succeeds.

        Returns:
            The rule set as written.

        Raises:
            ValueError: If ``updated.name`` is empty.
            RulesIOError: If the file cannot be opened, read, written or locked.
            RulesLockTimeoutError: If a lock timeout is set and expires.
            RulesParseError: If the existing content is malformed.
        """
        rules, _ = self.apply_update(updated)
        return rules

    def apply_update(self, updated: RoutingRule) -> tuple[list[RoutingRule], int]:
        """
        Same as update_by_name(), also returning how many rules were replaced.
        """
        if not updated.name:
            raise ValueError("Routing rule name must be a non-empty string")

        with self._update_lock:
            try:
                with open(self._path, "r+b", buffering=0) as f:
                    with self._lock(f, shared=False):
                        original = f.read()
                        current = self._parse(self._decode(original))
                        result, matched = replace_by_name(current, updated)
                        content = self._codec.encode([r.to_document() for r in result])
                        self._write(f, content.encode("utf-8"), original)
            except OSError as e:
                raise RulesIOError(self._path, str(e)) from e

        if matched:
            logger.info(
                "Updated routing rule '%s' (%d match(es)) in %s",
                updated.name,
                matched,
                self._path,
            )
        else:
            logger.debug("No routing rule named '%s' in %s", updated.name, self._path)
        return result, matched

    # --- Internals ---

    def _lock(self, fileobj: IO[bytes], *, shared: bool) -> Any:
        return _ScopedLock(
            self._lock_factory(fileobj, shared=shared, timeout=self._lock_timeout),
            self._path,
            self._lock_timeout,
        )

    def _decode(self, raw: bytes) -> str:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RulesParseError(self._path, f"file is not valid UTF-8: {e}") from e

    def _write(self, fileobj: IO[bytes], data: bytes, original: bytes) -> None:
        """
        Overwrite the file with ``data``.

        Space is reserved before any byte changes, so size limits and a full
        disk fail while the file is intact. Any later write error puts the
        original bytes back before the error propagates.
        """
        fd = fileobj.fileno()
        try:
            _reserve(fd, len(data))
            _write_all(fd, data)
        except OSError:
            try:
                _write_all(fd, original)
            except OSError:
                logger.exception("Could not restore routing rules at %s", self._path)
            raise

    def _parse(self, text: str) -> list[RoutingRule]:
        try:
            documents = self._codec.decode(text)
        except yaml.YAMLError as e:
            raise RulesParseError(self._path, f"invalid YAML: {e}") from e
        except TypeError as e:
            raise RulesParseError(self._path, str(e)) from e

        rules: list[RoutingRule] = []
        for index, document in enumerate(documents):
            try:
                rules.append(RoutingRule.model_validate(document))
            except ValidationError as e:
                raise RulesParseError(
                    self._path, f"document {index} is not a routing rule: {e}"
                ) from e
        return rules


class _ScopedLock:
    """Translate lock adapter failures into store errors carrying the path."""

    def __init__(self, lock: Any, path: Path, timeout: float | None) -> None:
        self._lock = lock
        self._path = path
        self._timeout = timeout

    def __enter__(self) -> Any:
        try:
            return self._lock.__enter__()
        except TimeoutError as e:
            raise RulesLockTimeoutError(self._path, self._timeout or 0.0) from e
        except OSError as e:
            raise RulesIOError(self._path, f"could not lock file: {e}") from e

    def __exit__(self, *exc_info: Any) -> Any:
        return self._lock.__exit__(*exc_info)


# errnos meaning the filesystem cannot preallocate, not that space is missing
_FALLOCATE_UNSUPPORTED = {errno.EOPNOTSUPP, errno.ENOTSUP, errno.EINVAL, errno.ENOSYS}


def _reserve(fd: int, size: int) -> None:
    if size == 0 or not hasattr(os, "posix_fallocate"):
        return
    try:
        os.posix_fallocate(fd, 0, size)
    except OSError as e:
        if e.errno not in _FALLOCATE_UNSUPPORTED:
            raise


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    offset = 0
    while offset < len(view):
        offset += os.pwrite(fd, view[offset:], offset)
    os.ftruncate(fd, len(data))
    os.fsync(fd)
