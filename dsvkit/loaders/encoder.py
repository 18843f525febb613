"""
Record encoding: typed records → lines of DSV text.

Each field is rendered with its column type's ``render`` and the fields
are joined with the column separator.  Under ``RFC4180Quoting`` a rendered
field is wrapped in quotes (inner quotes doubled) when it contains the
separator or the quote character, has surrounding whitespace, or begins or
ends with part of a multi-character separator, so that
the tokenizer reads the same text back.  Under ``NoQuoting`` fields are
written as-is.

``None`` renders as an empty field for every column type.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from dsvkit.configs.config import DEFAULT_PARSER, NoQuoting, ParserOptions
from dsvkit.models.models import Schema, ordered_values


def quote_field(text: str, options: ParserOptions) -> str:
    """Quote ``text`` if reading it back would otherwise change it."""
    quoting = options.quoting_mode
    if isinstance(quoting, NoQuoting) or not text:
        return text
    q = quoting.quote_char
    sep = options.column_separator
    if sep in text or q in text or text != text.strip() or _overlaps_separator(text, sep):
        return q + text.replace(q, q + q) + q
    return text


def _overlaps_separator(text: str, sep: str) -> bool:
    """
    True if ``text`` starts with a tail of ``sep`` or ends with a head of it.

    Only possible for separators longer than one character: with ``::``,
    ``a:`` next to another field would read back as ``a`` and ``:...``.
    """
    return any(
        text.endswith(sep[:i]) or text.startswith(sep[i:])
        for i in range(1, len(sep))
    )


def show_fields(schema: Schema, record: Any, options: ParserOptions = DEFAULT_PARSER) -> list[str]:
    """
    Render each field of ``record`` to text, in column order.

    Raises:
        SchemaError: If ``record`` does not fit ``schema``.
    """
    values = ordered_values(schema, record)
    return [
        quote_field("" if value is None else column.column_type.render(value), options)
        for column, value in zip(schema.columns, values)
    ]


def header_line(schema: Schema, options: ParserOptions = DEFAULT_PARSER) -> str:
    return options.column_separator.join(quote_field(name, options) for name in schema.names)


def produce_dsv(
    records: Iterable[Any],
    schema: Schema,
    options: ParserOptions = DEFAULT_PARSER,
) -> Iterator[str]:
    """
    Yield a header line, then one line per record.

    ``records`` may be any iterable, including a lazy stream; it is
    consumed one record at a time.  Records are mappings keyed by column
    name or sequences in column order.
    """
    yield header_line(schema, options)
    sep = options.column_separator
    for record in records:
        yield sep.join(show_fields(schema, record, options))


def produce_csv(records: Iterable[Any], schema: Schema) -> Iterator[str]:
    """``produce_dsv`` with the default comma-separated options."""
    return produce_dsv(records, schema, DEFAULT_PARSER)
