"""
Public entry points for reading and writing DSV files.

Wires the stages together; every reader is a lazy generator:

  source (FileSource) → lines → tokenizer → [header / inference] → decoder → consumer

Resource policy:
  - The file is opened when the first element is requested and closed when
    the generator is exhausted, raises, or is closed by the consumer
    (``close()``, garbage collection, or leaving a ``contextlib.closing``
    block).  Abandoning a stream early therefore still releases the file.
  - Writers open the destination, stream every line, and close it on any
    exit path.

Error policy:
  - ``EmptySourceError`` / ``ColumnCountError`` abort inference.
  - ``SourceError`` when a file cannot be opened (and, if configured, on a
    mid-file read error).
  - Per-field parse failures never raise; the read mode decides what
    happens to them.

Usage::

    schema = infer_schema("sales.csv")
    for record in read_table("sales.csv", schema):
        ...

    write_csv("out.csv", records, schema)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, TextIO

from dsvkit.configs.config import DEFAULT_PARSER, ParserOptions, ReaderConfig
from dsvkit.discovery.file_source import FileSource
from dsvkit.discovery.header_infer import read_col_headers
from dsvkit.discovery.tokenizer import tokenize_row
from dsvkit.loaders.encoder import produce_dsv
from dsvkit.loaders.file_sink import FileSink
from dsvkit.models.models import RowResult, Schema
from dsvkit.transformers.column_types import COMMON_COLUMNS, TypeRegistry
from dsvkit.transformers.row_generator import (
    pipe_row_results,
    pipe_table,
    pipe_table_debug,
    pipe_table_maybe,
)
from dsvkit.transformers.typing_infer import InferredType

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def produce_text_lines(path: Path | str, config: ReaderConfig | None = None) -> Iterator[str]:
    """Yield the lines of ``path`` without terminators."""
    config = config or ReaderConfig()
    with FileSource(
        path,
        encoding=config.encoding,
        raise_on_read_error=config.raise_on_read_error,
    ) as source:
        yield from source.lines()


def produce_tokens(
    path: Path | str,
    options: ParserOptions = DEFAULT_PARSER,
    config: ReaderConfig | None = None,
) -> Iterator[list[str]]:
    """Yield each line of ``path`` split into fields."""
    for line in produce_text_lines(path, config):
        yield tokenize_row(options, line)


# ---------------------------------------------------------------------------
# Inference
# ---------------------------------------------------------------------------

def infer_column_types(
    path: Path | str,
    options: ParserOptions = DEFAULT_PARSER,
    registry: TypeRegistry = COMMON_COLUMNS,
    config: ReaderConfig | None = None,
) -> list[tuple[str, InferredType]]:
    """
    Read the header and a bounded prefix of ``path`` and infer column types.

    The file is closed as soon as the prefix has been sampled.

    Raises:
        SourceError:      The file cannot be opened.
        EmptySourceError: Empty file and no header override.
        ColumnCountError: Header and data disagree on the number of columns.
    """
    config = config or ReaderConfig()
    tokens = produce_tokens(path, options, config)
    try:
        columns = read_col_headers(
            options,
            tokens,
            registry=registry,
            prefix_rows=config.prefix_rows,
            source_path=str(path),
        )
    finally:
        tokens.close()

    logger.info(
        "Inference complete: %d column(s) in %s",
        len(columns), Path(path).name,
    )
    return columns


def infer_schema(
    path: Path | str,
    options: ParserOptions = DEFAULT_PARSER,
    registry: TypeRegistry = COMMON_COLUMNS,
    config: ReaderConfig | None = None,
) -> Schema:
    """Infer column types of ``path`` and resolve them to a ``Schema``."""
    schema = Schema.from_inferred(
        infer_column_types(path, options, registry, config), registry
    )
    logger.debug("Inferred schema for %s: %s", Path(path).name, schema.describe())
    return schema


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def read_table(
    path: Path | str,
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
    config: ReaderConfig | None = None,
) -> Iterator[dict[str, Any]]:
    """Yield only the rows of ``path`` in which every field parsed."""
    yield from pipe_table(produce_tokens(path, options, config), schema, options)


def read_table_maybe(
    path: Path | str,
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
    config: ReaderConfig | None = None,
) -> Iterator[dict[str, Any]]:
    """Yield every row of ``path``; fields that failed to parse are ``None``."""
    yield from pipe_table_maybe(produce_tokens(path, options, config), schema, options)


def read_table_either(
    path: Path | str,
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
    config: ReaderConfig | None = None,
) -> Iterator[RowResult]:
    """Yield a ``RowResult`` for every row of ``path``."""
    yield from pipe_row_results(produce_tokens(path, options, config), schema, options)


def read_table_debug(
    path: Path | str,
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
    config: ReaderConfig | None = None,
    stream: TextIO | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Like ``read_table``, but print rows that failed to parse to ``stream``
    (``sys.stderr`` by default) with each field shown as ``Right <value>``
    or ``Left <raw text>``.
    """
    yield from pipe_table_debug(
        produce_tokens(path, options, config),
        schema,
        options,
        stream=stream,
    )


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

def consume_text_lines(
    path: Path | str,
    lines: Iterable[str],
    config: ReaderConfig | None = None,
) -> int:
    """
    Write each of ``lines`` to ``path``, one per line.

    Returns:
        Number of lines written.
    """
    config = config or ReaderConfig()
    with FileSink(path, encoding=config.encoding) as sink:
        for line in lines:
            sink.write_line(line)
        return sink.lines_written


def write_dsv(
    path: Path | str,
    records: Iterable[Any],
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
    config: ReaderConfig | None = None,
) -> int:
    """
    Write a header line and one line per record to ``path``.

    Returns:
        Number of lines written, header included.

    Raises:
        SchemaError: A record does not fit ``schema``.  Lines already
                     written stay in the file.
    """
    written = consume_text_lines(path, produce_dsv(records, schema, options), config)
    logger.info("Wrote %d record(s) to %s", written - 1, Path(path).name)
    return written


def write_csv(
    path: Path | str,
    records: Iterable[Any],
    schema: Schema,
    config: ReaderConfig | None = None,
) -> int:
    """``write_dsv`` with the default comma-separated options."""
    return write_dsv(path, records, schema, DEFAULT_PARSER, config)
