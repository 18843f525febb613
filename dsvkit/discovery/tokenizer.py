"""
Line tokenizer.

Splits one line of text into field strings:

  1. Naive split on the column separator (quoting not yet understood).
  2. ``NoQuoting``       → the chunks are returned unchanged.
  3. ``RFC4180Quoting``  → quoted sections are reassembled:
       - an empty chunk is an empty field;
       - a chunk that starts *and* ends with the quote character is a whole
         quoted field: outer quotes removed, doubled quotes collapsed;
       - a chunk that starts with the quote character but does not end with
         it opens a field that spans chunks: following chunks are re-joined
         with the separator up to the first one that ends with a quote;
       - any other chunk is an unquoted field, stripped of whitespace.

Both ends of a chunk are tested independently, so a lone quote character
counts as a complete (empty) quoted field.  Balanced quote counting is not
attempted.

The tokenizer never raises: malformed quoting degrades to best-effort
reassembly, and an unterminated quoted field absorbs the rest of the line.
"""

from __future__ import annotations

from dsvkit.configs.config import DEFAULT_PARSER, NoQuoting, ParserOptions


def tokenize_row(options: ParserOptions, line: str) -> list[str]:
    """
    Split ``line`` into fields according to ``options``.

    Args:
        options: Separator and quoting mode.
        line:    One line of text, without its line terminator.

    Returns:
        Ordered list of field strings.
    """
    sep = options.column_separator
    parts = line.split(sep)
    quoting = options.quoting_mode
    if isinstance(quoting, NoQuoting):
        return parts
    return reassemble_quoted_parts(sep, quoting.quote_char, parts)


def tokenize(line: str) -> list[str]:
    """``tokenize_row`` with the default options."""
    return tokenize_row(DEFAULT_PARSER, line)


def reassemble_quoted_parts(sep: str, quote_char: str, parts: list[str]) -> list[str]:
    """
    Re-join chunks of a naive split that belong to one quoted field.

    Args:
        sep:        The separator the chunks were split on.
        quote_char: Quote character.
        parts:      Chunks from ``line.split(sep)``.
    """
    fields: list[str] = []
    double_quote = quote_char * 2
    i = 0
    n = len(parts)

    def unescape(text: str) -> str:
        return text.replace(double_quote, quote_char)

    while i < n:
        part = parts[i]
        i += 1

        if not part:
            fields.append("")
            continue

        if not part.startswith(quote_char):
            fields.append(part.strip())
            continue

        if part.endswith(quote_char):
            fields.append(unescape(part[1:-1]))
            continue

        # Quoted field containing the separator: gather chunks up to the
        # first one that ends with a quote.
        pieces = [part[1:]]
        while i < n and not parts[i].endswith(quote_char):
            pieces.append(parts[i])
            i += 1
        if i < n:
            pieces.append(parts[i][:-1])
            i += 1
        fields.append(unescape(sep.join(pieces)))

    return fields
