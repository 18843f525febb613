"""
Column types: per-field parse and render capabilities.

Each ``ColumnType`` turns the raw text of one field into a Python value
(``parse``) and back into text (``render``).  ``parse`` is a **pure
function** that returns ``None`` when the text does not belong to the type;
it never raises.

Built-in types, most specific first:

  1. ``bool``      ``true`` / ``false`` (any case)         → ``bool``
  2. ``int``       ``[-+]?\\d+``                            → ``int``
  3. ``decimal``   plain decimal or exponent notation       → ``Decimal``
  4. ``date``      ``YYYY-MM-DD``                           → ``datetime.date``
  5. ``datetime``  ISO-8601 date-time, or a bare date       → ``datetime.datetime``
  6. ``text``      anything                                 → ``str``

Ambiguous formats (MM/DD/YYYY, comma-grouped numbers, etc.) are not
recognised and fall back to ``text``; locale-dependent formats are never
guessed.

Timezone offsets on date-times are stripped and the value is returned
timezone-naive.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from dsvkit.configs.exceptions import SchemaError

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------
_INT_RE = re.compile(r"^[-+]?\d+$")
_DECIMAL_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_DATE_FMT = "%Y-%m-%d"
_DATETIME_FMTS = [
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
]
# Timezone offset suffix, stripped before parsing
_TZ_OFFSET_RE = re.compile(r"(?<=\d)[+-]\d{2}:?\d{2}$")

_TRUE = "true"
_FALSE = "false"


class ColumnType(ABC):
    """
    Parse/render capability for one kind of column.

    Subclasses set ``name`` (the key used by ``TypeRegistry``) and implement
    ``parse``.  ``render`` defaults to ``str(value)``.
    """

    name: str = ""

    @abstractmethod
    def parse(self, text: str) -> Any | None:
        """Return the typed value for ``text``, or ``None`` if it does not parse."""

    def render(self, value: Any) -> str:
        """Return the text form of ``value``."""
        return str(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BoolType(ColumnType):
    name = "bool"

    def parse(self, text: str) -> bool | None:
        lowered = text.strip().lower()
        if lowered == _TRUE:
            return True
        if lowered == _FALSE:
            return False
        return None

    def render(self, value: Any) -> str:
        return _TRUE if value else _FALSE


class IntType(ColumnType):
    name = "int"

    def parse(self, text: str) -> int | None:
        stripped = text.strip()
        if not _INT_RE.match(stripped):
            return None
        try:
            return int(stripped)
        except ValueError:
            # beyond the interpreter's integer string-conversion limit
            return None


class DecimalType(ColumnType):
    name = "decimal"

    def parse(self, text: str) -> Decimal | None:
        stripped = text.strip()
        if not _DECIMAL_RE.match(stripped):
            return None
        try:
            return Decimal(stripped)
        except InvalidOperation:
            return None


class DateType(ColumnType):
    name = "date"

    def parse(self, text: str) -> date | None:
        stripped = text.strip()
        if not _DATE_RE.match(stripped):
            return None
        try:
            return datetime.strptime(stripped, _DATE_FMT).date()
        except ValueError:
            return None

    def render(self, value: Any) -> str:
        return value.isoformat()


class DatetimeType(ColumnType):
    """ISO-8601 date-times; a bare date parses as midnight."""

    name = "datetime"

    def parse(self, text: str) -> datetime | None:
        stripped = text.strip()
        if len(stripped) < 10 or not _DATE_RE.match(stripped[:10]):
            return None

        # Strip timezone offset suffix before parsing
        cleaned = _TZ_OFFSET_RE.sub("", stripped)

        for fmt in _DATETIME_FMTS:
            try:
                return datetime.strptime(cleaned, fmt)
            except ValueError:
                continue
        return None

    def render(self, value: Any) -> str:
        return value.isoformat()


class TextType(ColumnType):
    name = "text"

    def parse(self, text: str) -> str:
        return text


BOOL = BoolType()
INT = IntType()
DECIMAL = DecimalType()
DATE = DateType()
DATETIME = DatetimeType()
TEXT = TextType()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TypeRegistry:
    """
    Ordered collection of column types used for inference.

    Order matters: when several types accept every value seen in a column,
    the one listed first wins.  List specific types before general ones and
    end with a catch-all such as ``text``.

    Args:
        types: Column types, most specific first.

    Raises:
        SchemaError: If ``types`` is empty or two types share a name.
    """

    def __init__(self, types: Iterable[ColumnType]) -> None:
        self._types: tuple[ColumnType, ...] = tuple(types)
        if not self._types:
            raise SchemaError("TypeRegistry needs at least one column type.")
        self._by_name: dict[str, ColumnType] = {}
        for t in self._types:
            if t.name in self._by_name:
                raise SchemaError("Duplicate column type name.", column_name=t.name)
            self._by_name[t.name] = t

    @property
    def types(self) -> tuple[ColumnType, ...]:
        return self._types

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._by_name)

    @property
    def fallback(self) -> ColumnType:
        """Type used when inference gives no usable answer."""
        return self._by_name.get(TEXT.name, self._types[-1])

    def get(self, name: str) -> ColumnType:
        """
        Return the column type registered as ``name``.

        Raises:
            SchemaError: If no such type is registered.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise SchemaError(
                f"Unknown column type '{name}'. Valid types: {sorted(self._by_name)}"
            ) from None

    def accepting(self, text: str) -> frozenset[str]:
        """Names of every registered type whose ``parse`` accepts ``text``."""
        return frozenset(t.name for t in self._types if t.parse(text) is not None)

    def most_specific(self, candidates: frozenset[str]) -> ColumnType:
        """First registered type whose name is in ``candidates``, else ``fallback``."""
        for t in self._types:
            if t.name in candidates:
                return t
        return self.fallback

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self):
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)


COMMON_COLUMNS = TypeRegistry([BOOL, INT, DECIMAL, DATE, DATETIME, TEXT])
"""Default registry used when none is given."""
