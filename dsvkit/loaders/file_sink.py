"""
Text file sink implementing ``AbstractSink``.

Opens the destination for writing (truncating it), writes one line per
call with a ``\\n`` terminator, and closes the handle on scope exit.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dsvkit.configs.exceptions import SourceError
from dsvkit.discovery.base import AbstractSink

logger = logging.getLogger(__name__)


class FileSink(AbstractSink):
    """
    Line writer over a text file.

    Args:
        path: Destination path.  Parent directories are created if absent.
        encoding: Text encoding to write with.
    """

    def __init__(self, path: Path | str, encoding: str = "utf-8") -> None:
        super().__init__(path)
        self.encoding = encoding
        self.lines_written = 0
        self._file = None

    def open(self) -> None:
        """
        Open the destination for writing.

        Raises:
            SourceError: If the file cannot be created.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "w", encoding=self.encoding, newline="\n")  # noqa: WPS515
        except (OSError, LookupError) as e:
            raise SourceError(f"Cannot open {self.path} for writing: {e}", source_path=str(self.path)) from e

    def write_line(self, line: str) -> None:
        if self._file is None:
            raise RuntimeError("FileSink.open() must be called before write_line().")
        self._file.write(line)
        self._file.write("\n")
        self.lines_written += 1

    def close(self) -> None:
        """Flush and close the underlying file handle."""
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug("Wrote %d line(s) to %s", self.lines_written, self.path)
