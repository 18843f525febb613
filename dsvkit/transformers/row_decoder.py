"""
Row decoding: one tokenized row → one ``RowResult``.

Every column of the schema is decoded independently:

  - a token exists at the column's position → parsed with the column type;
    success gives ``Ok(value)``, failure gives ``Fail(raw token)``;
  - the row is too short → ``Fail("")`` without attempting a parse;
  - extra trailing tokens beyond the schema are ignored.

Decoding never raises.  Whether a partially decoded row is kept, reduced
or dropped is decided by the caller (see ``row_generator``).
"""

from __future__ import annotations

from typing import Sequence

from dsvkit.configs.config import ParserOptions
from dsvkit.discovery.tokenizer import tokenize_row
from dsvkit.models.models import Fail, FieldResult, Ok, RowResult, Schema


def decode_field(column_type, token: str) -> FieldResult:
    """Parse one token as ``column_type``."""
    value = column_type.parse(token)
    if value is None:
        return Fail(token)
    return Ok(value)


def decode_row(schema: Schema, tokens: Sequence[str]) -> RowResult:
    """
    Decode ``tokens`` against ``schema``.

    Args:
        schema: Columns, in file order.
        tokens: Field strings of one line, as produced by the tokenizer.

    Returns:
        A ``RowResult`` with exactly ``schema.arity`` fields.
    """
    fields: list[FieldResult] = []
    for i, column in enumerate(schema.columns):
        if i < len(tokens):
            fields.append(decode_field(column.column_type, tokens[i]))
        else:
            fields.append(Fail(""))
    return RowResult(schema, tuple(fields))


def read_row(options: ParserOptions, schema: Schema, line: str) -> RowResult:
    """Tokenize one line of text and decode it."""
    return decode_row(schema, tokenize_row(options, line))
