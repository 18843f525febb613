"""
Validation helpers for structural integrity.

Called while inferring column types and while encoding records, to catch
problems that make the rest of a run meaningless.

All functions raise the appropriate exception on failure rather than
returning a boolean; callers are expected to let the exception abort the
run.
"""

from __future__ import annotations

from typing import Sequence

from dsvkit.configs.exceptions import ColumnCountError, SchemaError

_NEWLINE_HINT = (
    "Number of columns in header differs from number of columns found in "
    "the remaining file. This may be due to newlines being present within "
    "the data itself (not just separating rows), which is not supported."
)


def validate_column_count(
    header: Sequence[str],
    column_count: int,
    row_number: int | None = None,
    source_path: str | None = None,
) -> None:
    """
    Assert that the header has one name per inferred column.

    Args:
        header:       Column names, from the first line or the override.
        column_count: Number of columns found in the sampled data rows.
        row_number:   1-based line number of the first row that disagreed.
        source_path:  Path of the file being read.

    Raises:
        ColumnCountError: If ``len(header) != column_count``.
    """
    if len(header) != column_count:
        raise ColumnCountError(
            _NEWLINE_HINT,
            source_path=source_path,
            row_number=row_number,
            expected=len(header),
            got=column_count,
        )


def validate_header(header: Sequence[str], source_path: str | None = None) -> None:
    """
    Assert that a header has at least one column name.

    Raises:
        ColumnCountError: If ``header`` is empty.
    """
    if not header:
        raise ColumnCountError(
            "Header has no columns.",
            source_path=source_path,
            row_number=1,
            expected=1,
            got=0,
        )


def validate_record_arity(values: Sequence[object], expected: int) -> None:
    """
    Assert that a record has exactly one value per schema column.

    Raises:
        SchemaError: If ``len(values) != expected``.
    """
    if len(values) != expected:
        raise SchemaError(
            f"Record has {len(values)} values, schema has {expected} columns."
        )
