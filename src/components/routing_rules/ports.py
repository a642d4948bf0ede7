"""
Routing rules component port definitions.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import IO, Any, Protocol


class RuleCodecPort(Protocol):
    """Port for converting between file text and a stream of documents."""

    def decode(self, text: str) -> list[dict[str, Any]]:
        """Parse every document in the text, in order."""
        ...

    def encode(self, documents: list[dict[str, Any]]) -> str:
        """Serialise documents back to one text stream."""
        ...


class FileLockFactory(Protocol):
    """Port for advisory locks held on an open file."""

    def __call__(
        self,
        fileobj: IO[Any],
        *,
        shared: bool = False,
        timeout: float | None = None,
    ) -> AbstractContextManager[Any]:
        """Return a context manager holding the lock while entered."""
        ...
