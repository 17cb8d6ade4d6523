"""Base classes and errors for value reader plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, TextIO, Tuple


class DecodeError(RuntimeError):
    """Raised when an input source cannot be read or decoded.

    Decode failures are fatal for a run: the caller aborts without reporting
    partial results.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class UnsupportedValueError(DecodeError):
    """Raised when a decoded value falls outside the supported value model."""


class ValueReader(ABC):
    """Contract for readers that turn a text source into top-level values."""

    name: str = ""
    suffixes: Tuple[str, ...] = ()

    def supports(self, path: Path) -> bool:
        """Return True when this reader handles files with ``path``'s suffix."""
        return path.suffix.lower() in self.suffixes

    @abstractmethod
    def read(self, stream: TextIO, source: str) -> Iterator[object]:
        """Lazily yield each top-level value held by ``stream``."""
