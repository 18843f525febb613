"""
Abstract base classes for line sources and sinks.

Every concrete resource (text file today, anything line-oriented later)
implements one of these interfaces.  The pipeline works exclusively
against them so reading and writing are resource-agnostic.

Usage:
    with FileSource(path) as source:
        for line in source.lines():
            process(line)

The resource is released when the ``with`` block exits: normally, on an
exception, or when a generator wrapping the block is closed early.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator


class AbstractSource(ABC):
    """
    Interface for line sources.

    Subclasses must implement ``open``, ``lines`` and ``close``.  Context
    manager support is provided here and delegates to ``open`` / ``close``.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @abstractmethod
    def open(self) -> None:
        """Acquire the resource.  Must be called before ``lines``."""

    @abstractmethod
    def lines(self) -> Iterator[str]:
        """Yield successive lines of text, without line terminators."""

    @abstractmethod
    def close(self) -> None:
        """Release the resource.  Safe to call more than once."""

    # ── context manager ──────────────────────────────────────────────────

    def __enter__(self) -> "AbstractSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None


class AbstractSink(ABC):
    """
    Interface for line sinks.

    Subclasses must implement ``open``, ``write_line`` and ``close``.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @abstractmethod
    def open(self) -> None:
        """Acquire the resource.  Must be called before ``write_line``."""

    @abstractmethod
    def write_line(self, line: str) -> None:
        """Write ``line`` followed by a line terminator."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release the resource.  Safe to call more than once."""

    def __enter__(self) -> "AbstractSink":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        return None
