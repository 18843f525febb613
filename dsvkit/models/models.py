"""
Core data models for parsed rows.

Column     : one named, typed column.
Schema     : ordered, fixed-arity sequence of columns a row is decoded against.
Ok / Fail  : per-field result: a parsed value, or the raw text that failed.
RowResult  : one decoded row: exactly one ``Ok`` or ``Fail`` per column.

Schemas are plain data.  ``Schema.from_inferred`` turns the output of type
inference (``[(name, InferredType), ...]``) into a concrete schema, so a
file can be inferred and then read without any code generation step.

``RowResult`` values are created once per input line and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Sequence, Union

from dsvkit.configs.exceptions import SchemaError
from dsvkit.transformers.column_types import COMMON_COLUMNS, ColumnType, TypeRegistry
from dsvkit.utils.validation import validate_record_arity

if TYPE_CHECKING:
    from dsvkit.transformers.typing_infer import InferredType


@dataclass(frozen=True, slots=True)
class Column:
    """
    A named column and the type its fields are parsed as.

    Attributes:
        name:        Column name as it appears in the header line.
        column_type: Parse/render capability for the column's values.
    """

    name: str
    column_type: ColumnType

    @property
    def type_name(self) -> str:
        return self.column_type.name


@dataclass(frozen=True, slots=True)
class Schema:
    """
    Ordered columns of a table.

    Attributes:
        columns: The columns, in file order.  Names must be unique.

    Raises:
        SchemaError: If there are no columns or a name repeats.
    """

    columns: tuple[Column, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.columns, tuple):
            object.__setattr__(self, "columns", tuple(self.columns))
        if not self.columns:
            raise SchemaError("Schema must have at least one column.")
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                raise SchemaError("Duplicate column name.", column_name=column.name)
            seen.add(column.name)

    @classmethod
    def of(
        cls,
        *pairs: tuple[str, Union[ColumnType, str]],
        registry: TypeRegistry = COMMON_COLUMNS,
    ) -> "Schema":
        """
        Build a schema from ``(name, type)`` pairs.

        ``type`` is either a ``ColumnType`` instance or the name of a type in
        ``registry``.

        Example::

            Schema.of(("id", "int"), ("name", TEXT))

        Raises:
            SchemaError: If a type name is not registered.
        """
        columns = []
        for name, column_type in pairs:
            if isinstance(column_type, str):
                column_type = registry.get(column_type)
            columns.append(Column(name, column_type))
        return cls(tuple(columns))

    @classmethod
    def from_inferred(
        cls,
        inferred: Iterable[tuple[str, "InferredType"]],
        registry: TypeRegistry = COMMON_COLUMNS,
    ) -> "Schema":
        """Resolve each inferred column type against ``registry``."""
        return cls(tuple(Column(name, t.resolve(registry)) for name, t in inferred))

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def arity(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def describe(self) -> list[tuple[str, str]]:
        """``[(column name, type name), ...]`` for display or logging."""
        return [(c.name, c.type_name) for c in self.columns]


# ---------------------------------------------------------------------------
# Per-field results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Ok:
    """A field that parsed as its column's type."""

    value: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Fail:
    """
    A field that did not parse.

    ``raw`` holds the original text, or ``""`` when the row was too short
    to have a field at this position.
    """

    raw: str

    @property
    def ok(self) -> bool:
        return False


FieldResult = Union[Ok, Fail]


@dataclass(frozen=True, slots=True)
class RowResult:
    """
    One decoded row: a ``FieldResult`` for each column of ``schema``.

    Attributes:
        schema: Schema the row was decoded against.
        fields: One result per column, in column order.
    """

    schema: Schema
    fields: tuple[FieldResult, ...]

    @property
    def is_complete(self) -> bool:
        """True when every field parsed."""
        return all(isinstance(f, Ok) for f in self.fields)

    @property
    def failures(self) -> list[tuple[str, str]]:
        """``(column name, raw text)`` of every field that failed."""
        return [
            (col.name, f.raw)
            for col, f in zip(self.schema.columns, self.fields)
            if isinstance(f, Fail)
        ]

    def values_or_none(self) -> dict[str, Any]:
        """Column name → parsed value, with ``None`` for failed fields."""
        return {
            col.name: f.value if isinstance(f, Ok) else None
            for col, f in zip(self.schema.columns, self.fields)
        }

    def to_record(self) -> dict[str, Any] | None:
        """Column name → parsed value if every field parsed, else ``None``."""
        if not self.is_complete:
            return None
        return {col.name: f.value for col, f in zip(self.schema.columns, self.fields)}

    def debug_fields(self) -> list[str]:
        """Render each field as ``Right <value>`` or ``Left <raw text>``."""
        rendered = []
        for col, f in zip(self.schema.columns, self.fields):
            if isinstance(f, Ok):
                rendered.append(f"Right {col.column_type.render(f.value)}")
            else:
                rendered.append(f"Left {f.raw}")
        return rendered

    def __getitem__(self, index: int) -> FieldResult:
        return self.fields[index]

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[FieldResult]:
        return iter(self.fields)


def ordered_values(schema: Schema, record: Any) -> Sequence[Any]:
    """
    Values of ``record`` in column order.

    ``record`` may be a mapping keyed by column name or a positional
    sequence.

    Raises:
        SchemaError: If a column is missing from a mapping, or a sequence
                     has the wrong number of values.
    """
    if hasattr(record, "keys"):
        try:
            return [record[name] for name in schema.names]
        except KeyError as e:
            raise SchemaError("Record is missing a column.", column_name=str(e.args[0])) from e

    values = list(record)
    validate_record_arity(values, schema.arity)
    return values
