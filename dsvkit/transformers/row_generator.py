"""
The transform stage: token rows → decoded rows.

Streams tokenized rows through the row decoder and yields them according
to the selected mode:

  - **either**  ``RowResult`` per line; failed fields keep their raw text.
  - **maybe**   ``dict[name, value | None]`` per line; failed fields → ``None``.
  - **strict**  ``dict[name, value]`` for fully decoded lines only; any line
                with a failed field is dropped.
  - **debug**   as strict, but each dropped line is reported on a side
                channel as ``Right <value>`` / ``Left <raw text>`` fields.

Key properties:
  - **Lazy**: one row is in flight at a time; nothing upstream is read
    until the consumer asks for the next row.
  - **Order-preserving**: rows come out in input order.
  - **Header aware**: unless ``options.header_override`` is set, the
    first row is the header and is discarded.

Usage::

    for record in pipe_table(produce_tokens(path), schema):
        # record == {"id": 1, "amount": Decimal("2.50"), ...}
        pass
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Iterable, Iterator, Sequence, TextIO

from dsvkit.configs.config import DEFAULT_PARSER, ParserOptions
from dsvkit.models.models import RowResult, Schema
from dsvkit.transformers.row_decoder import decode_row, read_row

logger = logging.getLogger(__name__)


def skip_header(rows: Iterable[Any], options: ParserOptions) -> Iterator[Any]:
    """
    Drop the first element of ``rows`` unless a header override is set.

    The first element is only pulled when the first data row is requested.
    """
    it = iter(rows)
    if options.header_override is None:
        next(it, None)
    yield from it


def pipe_table_either(
    lines: Iterable[str],
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
) -> Iterator[RowResult]:
    """
    Decode lines of text, keeping the raw text of every failed field.

    Args:
        lines:   Lines of text (not yet tokenized).
        schema:  Columns to decode against.
        options: Separator, quoting and header override.
    """
    for line in skip_header(lines, options):
        yield read_row(options, schema, line)


def pipe_row_results(
    rows: Iterable[Sequence[str]],
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
) -> Iterator[RowResult]:
    """Decode tokenized rows, keeping the raw text of every failed field."""
    for tokens in skip_header(rows, options):
        yield decode_row(schema, tokens)


def pipe_table_maybe(
    rows: Iterable[Sequence[str]],
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
) -> Iterator[dict[str, Any]]:
    """Decode tokenized rows; failed fields become ``None``."""
    for result in pipe_row_results(rows, schema, options):
        yield result.values_or_none()


def pipe_table(
    rows: Iterable[Sequence[str]],
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
) -> Iterator[dict[str, Any]]:
    """Decode tokenized rows, yielding only rows where every field parsed."""
    dropped = 0
    for result in pipe_row_results(rows, schema, options):
        record = result.to_record()
        if record is None:
            dropped += 1
            continue
        yield record
    if dropped:
        logger.debug("Dropped %d row(s) with unparseable fields", dropped)


def pipe_table_debug(
    rows: Iterable[Sequence[str]],
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
    stream: TextIO | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Like ``pipe_table``, but print every dropped row to ``stream``.

    Args:
        stream: Side channel for diagnostics.  Defaults to ``sys.stderr``
                (looked up at call time).
    """
    out = stream if stream is not None else sys.stderr
    for result in pipe_row_results(rows, schema, options):
        record = result.to_record()
        if record is None:
            print(debug_line(result), file=out)
            continue
        yield record


def debug_line(result: RowResult) -> str:
    """
    One diagnostic line for ``result``: a list of quoted, escaped fields,
    e.g. ``["Right 1","Left x"]``.
    """
    return json.dumps(result.debug_fields(), ensure_ascii=False, separators=(",", ":"))
