"""
Custom exceptions for the DSV parsing pipeline.

Hierarchy:
    DSVError
    ├── SourceError            A source or sink could not be opened or read.
    ├── StructuralError        The file violates the one-record-per-line layout; run aborts.
    │   ├── EmptySourceError   No header row available and no header override given.
    │   └── ColumnCountError   Header field count differs from the data column count.
    └── SchemaError            Invalid schema, unknown column type or record arity.

A field that fails to parse is never an exception; it is carried as a
``Fail`` value inside the decoded row.
"""

from __future__ import annotations


class DSVError(Exception):
    """Base class for all dsvkit errors."""


class SourceError(DSVError):
    """
    Raised when a resource cannot be opened, read or written.

    Args:
        message: Human-readable description of the failure.
        source_path: Path of the file involved, if any.
    """

    def __init__(self, message: str, source_path: str | None = None) -> None:
        super().__init__(message)
        self.source_path = source_path

    def __str__(self) -> str:
        base = super().__str__()
        if self.source_path:
            return f"{base} | source={self.source_path}"
        return base


class StructuralError(DSVError):
    """
    Fatal structural problem discovered while reading a source.

    Args:
        message: Human-readable description.
        source_path: Path of the file being read, if any.
    """

    def __init__(self, message: str, source_path: str | None = None) -> None:
        super().__init__(message)
        self.source_path = source_path

    def __str__(self) -> str:
        base = super().__str__()
        if self.source_path:
            return f"{base} | source={self.source_path}"
        return base


class EmptySourceError(StructuralError):
    """Raised when a source has no header row and no header override was given."""


class ColumnCountError(StructuralError):
    """
    Raised when the header's field count differs from the number of columns
    found in the remaining rows.

    This usually means a value contains an unescaped newline, which breaks
    the one-record-per-line assumption.

    Args:
        message: Human-readable description.
        source_path: Path of the file.
        row_number: 1-based line number where the mismatch was detected.
        expected: Number of columns in the header.
        got: Number of columns found in the data.
    """

    def __init__(
        self,
        message: str,
        source_path: str | None = None,
        row_number: int | None = None,
        expected: int | None = None,
        got: int | None = None,
    ) -> None:
        super().__init__(message, source_path)
        self.row_number = row_number
        self.expected = expected
        self.got = got

    def __str__(self) -> str:
        base = super().__str__()
        parts = []
        if self.row_number is not None:
            parts.append(f"row={self.row_number}")
        if self.expected is not None:
            parts.append(f"expected={self.expected}")
        if self.got is not None:
            parts.append(f"got={self.got}")
        if parts:
            return f"{base} | {' '.join(parts)}"
        return base


class SchemaError(DSVError):
    """
    Raised for an invalid schema or a record that does not fit its schema.

    Args:
        message: Human-readable description.
        column_name: The offending column, if any.
    """

    def __init__(self, message: str, column_name: str | None = None) -> None:
        super().__init__(message)
        self.column_name = column_name

    def __str__(self) -> str:
        base = super().__str__()
        if self.column_name:
            return f"{base} | column={self.column_name}"
        return base
