"""
Text file source implementing ``AbstractSource``.

Handles:
- Configurable encoding (``utf-8`` by default, ``latin-1`` for ISO-8859-1).
- Windows CRLF and Unix LF line endings (universal newlines).
- Lazy reading, one line in memory at a time.

End-of-input policy:
  A read or decoding error in the middle of the file ends the line stream
  as if end-of-file had been reached; a warning is logged so the
  truncation is visible.  With ``raise_on_read_error=True`` a
  ``SourceError`` is raised instead.  Failing to *open* the file always
  raises ``SourceError``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from dsvkit.configs.exceptions import SourceError
from dsvkit.discovery.base import AbstractSource

logger = logging.getLogger(__name__)


class FileSource(AbstractSource):
    """
    Line reader over a text file.

    Args:
        path: Path to the file.
        encoding: Text encoding of the file.
        raise_on_read_error: Raise ``SourceError`` on a mid-file read error
            instead of ending the stream.
    """

    def __init__(
        self,
        path: Path | str,
        encoding: str = "utf-8",
        raise_on_read_error: bool = False,
    ) -> None:
        super().__init__(path)
        self.encoding = encoding
        self.raise_on_read_error = raise_on_read_error
        self._file = None

    def open(self) -> None:
        """
        Open the file for reading.

        Raises:
            SourceError: If the file cannot be opened.
        """
        try:
            self._file = open(self.path, encoding=self.encoding)  # noqa: WPS515
        except (OSError, LookupError) as e:
            raise SourceError(f"Cannot open {self.path}: {e}", source_path=str(self.path)) from e

    def lines(self) -> Iterator[str]:
        """
        Yield each line of the file without its terminator.

        Raises:
            SourceError: On a read error, only if ``raise_on_read_error``.
        """
        if self._file is None:
            raise RuntimeError("FileSource.open() must be called before lines().")

        line_number = 0
        while True:
            try:
                line = self._file.readline()
            except (OSError, UnicodeDecodeError) as e:
                if self.raise_on_read_error:
                    raise SourceError(
                        f"Read error after line {line_number} of {self.path}: {e}",
                        source_path=str(self.path),
                    ) from e
                logger.warning(
                    "Read error after line %d of %s, ending stream: %s",
                    line_number, self.path, e,
                )
                return
            if not line:
                return
            line_number += 1
            yield line[:-1] if line.endswith("\n") else line

    def close(self) -> None:
        """Close the underlying file handle."""
        if self._file is not None:
            self._file.close()
            self._file = None
