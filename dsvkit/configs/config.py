"""
Parser and reader configuration.

Two layers of configuration live here:

``ParserOptions``
    Immutable description of the text format (header override, column
    separator, quoting mode).  One instance is shared by every stage of a
    pipeline run.

``ReaderConfig``
    Runtime tunables (inference prefix size, file encoding, I/O error
    policy).  Defaults may be overridden through environment variables,
    optionally loaded from a ``.env`` file via ``load_config``.

Usage:
    from dsvkit.configs.config import DEFAULT_PARSER, ParserOptions, RFC4180Quoting

    opts = ParserOptions(column_separator="\\t")
    opts = DEFAULT_PARSER.with_separator(";")
    cfg  = load_config(".env")
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, Union

from dotenv import load_dotenv


DEFAULT_SEPARATOR: str = ","
DEFAULT_QUOTE_CHAR: str = '"'

DEFAULT_PREFIX_ROWS: int = 1000
"""Number of data rows scanned when inferring column types."""


# ---------------------------------------------------------------------------
# Quoting modes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NoQuoting:
    """No quoting.  The separator must never appear inside a value."""


@dataclass(frozen=True, slots=True)
class RFC4180Quoting:
    """
    Values may be wrapped in ``quote_char``; a literal quote is doubled.

    Mostly RFC4180 compliant, except that newlines inside values are not
    supported (one record per physical line).
    """

    quote_char: str = DEFAULT_QUOTE_CHAR

    def __post_init__(self) -> None:
        if len(self.quote_char) != 1:
            raise ValueError(
                f"quote_char must be a single character, got {self.quote_char!r}"
            )


QuotingMode = Union[NoQuoting, RFC4180Quoting]


# ---------------------------------------------------------------------------
# Parser options
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ParserOptions:
    """
    Text-format options for reading and writing.

    Attributes:
        header_override:  Column names to use instead of reading them from
                          the first line.  When ``None`` the first line of
                          every source is consumed as the header.
        column_separator: Field delimiter.  May be longer than one character.
        quoting_mode:     ``NoQuoting()`` or ``RFC4180Quoting(quote_char)``.
    """

    header_override: tuple[str, ...] | None = None
    column_separator: str = DEFAULT_SEPARATOR
    quoting_mode: QuotingMode = field(default_factory=RFC4180Quoting)

    def __post_init__(self) -> None:
        if not self.column_separator:
            raise ValueError("column_separator must not be empty")
        if self.header_override is not None and not isinstance(self.header_override, tuple):
            object.__setattr__(self, "header_override", tuple(self.header_override))

    def with_separator(self, separator: str) -> "ParserOptions":
        """Return a copy of these options using ``separator``."""
        return dataclasses.replace(self, column_separator=separator)

    def with_header(self, header: Sequence[str] | None) -> "ParserOptions":
        """Return a copy of these options with ``header`` as the override."""
        return dataclasses.replace(
            self, header_override=None if header is None else tuple(header)
        )


DEFAULT_PARSER = ParserOptions()
"""Header read from the first line, comma separated, double-quote quoting."""


# ---------------------------------------------------------------------------
# Runtime configuration
# ---------------------------------------------------------------------------

def _env_flag(key: str, default: str = "false") -> bool:
    return os.environ.get(key, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class ReaderConfig:
    """
    Runtime configuration for reading and writing files.

    Attributes:
        prefix_rows:         Maximum number of data rows consumed by column
                             type inference.
        encoding:            Text encoding used to open sources and sinks.
                             ``"latin-1"`` reads ISO-8859-1 files.
        raise_on_read_error: If False (default) an I/O or decoding error in
                             the middle of a file ends the line stream, as if
                             end-of-file had been reached, and a warning is
                             logged.  If True a ``SourceError`` is raised.
    """

    prefix_rows: int = field(
        default_factory=lambda: int(
            os.environ.get("DSV_PREFIX_ROWS", str(DEFAULT_PREFIX_ROWS))
        )
    )
    encoding: str = field(
        default_factory=lambda: os.environ.get("DSV_ENCODING", "utf-8")
    )
    raise_on_read_error: bool = field(
        default_factory=lambda: _env_flag("DSV_RAISE_ON_READ_ERROR")
    )

    def __post_init__(self) -> None:
        if self.prefix_rows < 1:
            raise ValueError(f"prefix_rows must be positive, got {self.prefix_rows}")


def load_config(env_file: Path | str | None = None) -> ReaderConfig:
    """
    Build a ``ReaderConfig`` after loading ``env_file`` into the environment.

    Variables already present in ``os.environ`` win over the file.  When
    ``env_file`` is ``None`` python-dotenv searches for a ``.env`` file
    starting from the current directory.
    """
    load_dotenv(dotenv_path=env_file, override=False)
    return ReaderConfig()
