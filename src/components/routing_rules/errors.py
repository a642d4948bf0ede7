"""
Routing rules store error taxonomy.

Every error keeps the configured rules path so failures can be traced back to
the file that caused them. Underlying causes are chained with ``raise ... from``.
"""

from __future__ import annotations

from pathlib import Path


class RoutingRulesError(Exception):
    """Base class for routing rules store errors."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = str(path)
        super().__init__(message)


class RulesIOError(RoutingRulesError):
    """Raised when the rules file cannot be opened, read, written or locked."""

    def __init__(self, path: Path | str, detail: str | None = None) -> None:
        message = f"Failed to read or update routing rules at path: {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(path, message)


class RulesParseError(RoutingRulesError):
    """Raised when the rules file is not a valid stream of routing rule documents."""

    def __init__(self, path: Path | str, detail: str) -> None:
        self.detail = detail
        super().__init__(path, f"Failed to parse routing rules at path: {path}: {detail}")


class RulesLockTimeoutError(RulesIOError):
    """Raised when the file lock is not obtained within the configured wait."""

    def __init__(self, path: Path | str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(path, f"lock not acquired within {timeout}s")
