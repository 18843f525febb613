"""
Column type inference.

Every cell is inferred independently to an ``InferredType``: the set of
column types that accept the cell's text.  Cells of one column are merged
with ``combine`` (set intersection), so a column's inferred type is the
set of types consistent with *every* value seen so far.

``InferredType`` is a commutative monoid:

  - ``combine`` is associative and commutative.
  - ``InferredType.empty()`` (no constraint yet) is the identity.  It is
    also what an empty or whitespace-only cell infers to, so null cells
    never influence the column type.

Resolution to a concrete ``ColumnType`` happens last, through
``TypeRegistry.most_specific``:

  - ``1``, ``2``        → {int, decimal, text}  → int
  - ``1``, ``2.5``      → {decimal, text}       → decimal
  - ``2024-01-15``, ``2024-01-15T09:30:00``
                        → {datetime, text}      → datetime (date promoted)
  - ``1``, ``N/A``      → {text}                → text
  - all cells empty     → unconstrained         → text
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from dsvkit.transformers.column_types import COMMON_COLUMNS, ColumnType, TypeRegistry


@dataclass(frozen=True, slots=True)
class InferredType:
    """
    Accumulated type constraint for one column.

    Attributes:
        candidates: Names of the column types consistent with all values
                    seen so far, or ``None`` when nothing constrains the
                    column yet.
    """

    candidates: frozenset[str] | None = None

    @classmethod
    def empty(cls) -> "InferredType":
        """The identity element: no constraint."""
        return _UNCONSTRAINED

    @property
    def is_unconstrained(self) -> bool:
        return self.candidates is None

    def combine(self, other: "InferredType") -> "InferredType":
        """Merge two observations of the same column."""
        if self.candidates is None:
            return other
        if other.candidates is None:
            return self
        return InferredType(self.candidates & other.candidates)

    __add__ = combine

    def resolve(self, registry: TypeRegistry = COMMON_COLUMNS) -> ColumnType:
        """Most specific registered type consistent with this observation."""
        if self.candidates is None:
            return registry.fallback
        return registry.most_specific(self.candidates)

    def __repr__(self) -> str:
        if self.candidates is None:
            return "InferredType(*)"
        return f"InferredType({{{', '.join(sorted(self.candidates))}}})"


_UNCONSTRAINED = InferredType()


# Cell-level inference


def infer_cell_type(value: str, registry: TypeRegistry = COMMON_COLUMNS) -> InferredType:
    """
    Infer the type of a single field.

    Args:
        value: Raw field text.  Empty and whitespace-only values return the
               identity (treated as null; does not constrain the column).
        registry: Column types to test the value against.
    """
    if not value.strip():
        return _UNCONSTRAINED
    return InferredType(registry.accepting(value))


# Row-level inference


def infer_row_types(
    tokens: Sequence[str],
    registry: TypeRegistry = COMMON_COLUMNS,
) -> list[InferredType]:
    """Infer each field of one tokenized row."""
    return [infer_cell_type(token, registry) for token in tokens]


def combine_row_types(
    acc: Sequence[InferredType],
    row: Sequence[InferredType],
) -> list[InferredType]:
    """
    Fold one row's inferred types into the running vector, position-wise.

    Positions missing from either side are dropped, so a short row shrinks
    the vector.  Callers detect that as a column-count mismatch.
    """
    return [a.combine(b) for a, b in zip(acc, row)]


def combine_all(types: Iterable[InferredType]) -> InferredType:
    """Combine any number of observations of one column."""
    result = _UNCONSTRAINED
    for t in types:
        result = result.combine(t)
    return result
