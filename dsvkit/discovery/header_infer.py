"""
Header extraction and prefix type inference.

Reads a bounded prefix of a token-row stream and returns the column
names paired with their inferred types:

1. Header: ``options.header_override`` if set, otherwise the first row
   (``EmptySourceError`` if there is none).
2. Types: the first data row is inferred cell by cell, then every
   following row is folded into the running vector with
   ``InferredType.combine``, position-wise.  At most ``prefix_rows`` data
   rows are consumed; the rest of the stream is never pulled.
3. The header's field count must equal the number of inferred columns
   (``ColumnCountError`` otherwise).  A header-only source infers the
   unconstrained type for every column.

Memory use is proportional to the number of columns, not rows.
"""

from __future__ import annotations

import logging
from itertools import islice
from typing import Iterable, Sequence

from dsvkit.configs.config import DEFAULT_PREFIX_ROWS, ParserOptions
from dsvkit.configs.exceptions import EmptySourceError
from dsvkit.transformers.column_types import COMMON_COLUMNS, TypeRegistry
from dsvkit.transformers.typing_infer import (
    InferredType,
    combine_row_types,
    infer_row_types,
)
from dsvkit.utils.validation import validate_column_count, validate_header

logger = logging.getLogger(__name__)


def prefix_inference(
    rows: Iterable[Sequence[str]],
    registry: TypeRegistry = COMMON_COLUMNS,
    first_row_number: int = 1,
) -> tuple[list[InferredType], int | None]:
    """
    Fold the inferred types of ``rows`` into one vector.

    Args:
        rows:             Token rows to sample; the caller bounds the count.
        registry:         Column types to infer against.
        first_row_number: Line number of the first row, for error reporting.

    Returns:
        ``(types, shrunk_at)`` where ``shrunk_at`` is the line number of the
        first row that had fewer fields than the rows before it, or ``None``.
        An empty ``rows`` gives ``([], None)``.
    """
    it = iter(rows)
    first = next(it, None)
    if first is None:
        return [], None

    types = infer_row_types(first, registry)
    shrunk_at = None
    for row_number, row in enumerate(it, start=first_row_number + 1):
        width = len(types)
        types = combine_row_types(types, infer_row_types(row, registry))
        if shrunk_at is None and len(types) < width:
            shrunk_at = row_number
    return types, shrunk_at


def read_col_headers(
    options: ParserOptions,
    rows: Iterable[Sequence[str]],
    registry: TypeRegistry = COMMON_COLUMNS,
    prefix_rows: int = DEFAULT_PREFIX_ROWS,
    source_path: str | None = None,
) -> list[tuple[str, InferredType]]:
    """
    Extract column names and infer column types from a token-row stream.

    Args:
        options:     Supplies ``header_override``.
        rows:        Tokenized rows, header first unless overridden.
        registry:    Column types to infer against.
        prefix_rows: Maximum number of data rows to sample.
        source_path: Path of the file, for error messages.

    Returns:
        ``[(column name, InferredType), ...]`` in column order.

    Raises:
        EmptySourceError: No header override and ``rows`` is empty.
        ColumnCountError: Header and data disagree on the number of columns.
    """
    it = iter(rows)
    if options.header_override is not None:
        header = list(options.header_override)
        first_data_line = 1
    else:
        first = next(it, None)
        if first is None:
            raise EmptySourceError("Empty source has no header row.", source_path=source_path)
        header = list(first)
        first_data_line = 2

    validate_header(header, source_path=source_path)

    types, shrunk_at = prefix_inference(islice(it, prefix_rows), registry, first_data_line)
    if not types:
        logger.info("No data rows in %s; all columns unconstrained", source_path or "source")
        return [(name, InferredType.empty()) for name in header]

    validate_column_count(
        header,
        len(types),
        row_number=shrunk_at if shrunk_at is not None else first_data_line,
        source_path=source_path,
    )
    return list(zip(header, types))
