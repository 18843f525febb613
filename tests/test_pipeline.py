"""
Streaming pipeline: test_pipeline.py

Sources:
  - produce_text_lines strips terminators, handles CRLF, preserves order
  - Missing file → SourceError
  - latin-1 encoding via ReaderConfig
  - Mid-file decode error ends the stream (warning) or raises when configured
  - Early abandonment of a stream closes the file

Inference over files:
  - infer_column_types / infer_schema on a small file
  - Header override over a file
  - Empty file → EmptySourceError
  - Embedded newline in a quoted value → ColumnCountError
  - Only the configured prefix is sampled

Readers:
  - read_table (strict), read_table_maybe, read_table_either, read_table_debug
  - Infer then read end to end
"""

from __future__ import annotations

import io
import logging
from decimal import Decimal
from pathlib import Path

import pytest

from dsvkit.configs.config import DEFAULT_PARSER, NoQuoting, ParserOptions, ReaderConfig
from dsvkit.configs.exceptions import ColumnCountError, EmptySourceError, SchemaError, SourceError
from dsvkit.discovery.file_source import FileSource
from dsvkit.models.models import Fail, Schema
from dsvkit.pipeline import (
    infer_column_types,
    infer_schema,
    produce_text_lines,
    produce_tokens,
    read_table,
    read_table_debug,
    read_table_either,
    read_table_maybe,
)


# ============================================================================
# Helpers
# ============================================================================

def write_lines(path: Path, lines: list[str], newline: str = "\n") -> Path:
    path.write_bytes(newline.join(lines).encode("utf-8") + newline.encode())
    return path


@pytest.fixture
def sample_csv(tmp_path) -> Path:
    return write_lines(
        tmp_path / "sample.csv",
        ["a,b,c", "1,2.5,x", "2,3.5,y"],
    )


@pytest.fixture
def closes(monkeypatch) -> list[Path]:
    """Record every FileSource.close() call."""
    closed: list[Path] = []
    original = FileSource.close

    def spy(self):
        if self._file is not None:
            closed.append(self.path)
        original(self)

    monkeypatch.setattr(FileSource, "close", spy)
    return closed


# ============================================================================
# Sources
# ============================================================================

class TestProduceTextLines:
    def test_lines(self, sample_csv):
        assert list(produce_text_lines(sample_csv)) == ["a,b,c", "1,2.5,x", "2,3.5,y"]

    def test_crlf(self, tmp_path):
        path = write_lines(tmp_path / "crlf.csv", ["a,b", "1,2"], newline="\r\n")
        assert list(produce_text_lines(path)) == ["a,b", "1,2"]

    def test_no_trailing_newline(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_text("a\n1", encoding="utf-8")
        assert list(produce_text_lines(path)) == ["a", "1"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceError) as exc:
            list(produce_text_lines(tmp_path / "nope.csv"))
        assert "nope.csv" in str(exc.value)

    def test_latin1(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes("name\ncaf\xe9\n".encode("latin-1"))
        lines = list(produce_text_lines(path, ReaderConfig(encoding="latin-1")))
        assert lines == ["name", "café"]

    def test_decode_error_ends_stream(self, tmp_path, caplog):
        path = tmp_path / "bad.csv"
        path.write_bytes(b"a\n\xff\xfe\n")
        with caplog.at_level(logging.WARNING):
            lines = list(produce_text_lines(path, ReaderConfig(encoding="utf-8")))
        assert lines == []
        assert "ending stream" in caplog.text

    def test_decode_error_raises_when_configured(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_bytes(b"a\n\xff\xfe\n")
        config = ReaderConfig(encoding="utf-8", raise_on_read_error=True)
        with pytest.raises(SourceError):
            list(produce_text_lines(path, config))

    def test_file_closed_on_exhaustion(self, sample_csv, closes):
        list(produce_text_lines(sample_csv))
        assert closes == [sample_csv]

    def test_file_closed_on_early_abandonment(self, sample_csv, closes):
        lines = produce_text_lines(sample_csv)
        assert next(lines) == "a,b,c"
        assert closes == []
        lines.close()
        assert closes == [sample_csv]

    def test_missing_file_not_opened_until_pulled(self, tmp_path):
        lines = produce_text_lines(tmp_path / "missing.csv")
        with pytest.raises(SourceError):
            next(lines)

    def test_produce_tokens(self, tmp_path):
        path = write_lines(tmp_path / "t.csv", ['1,"hello, world",3'])
        assert list(produce_tokens(path)) == [["1", "hello, world", "3"]]


# ============================================================================
# Inference over files
# ============================================================================

class TestInferOverFiles:
    def test_infer_column_types(self, sample_csv):
        columns = infer_column_types(sample_csv)
        assert [(name, t.resolve().name) for name, t in columns] == [
            ("a", "int"), ("b", "decimal"), ("c", "text"),
        ]

    def test_infer_schema(self, sample_csv):
        assert infer_schema(sample_csv).describe() == [
            ("a", "int"), ("b", "decimal"), ("c", "text"),
        ]

    def test_file_closed_after_inference(self, sample_csv, closes):
        infer_schema(sample_csv)
        assert closes == [sample_csv]

    def test_header_override(self, tmp_path):
        path = write_lines(tmp_path / "t.csv", ["id,name", "1,x"])
        opts = DEFAULT_PARSER.with_header(["c1", "c2"])
        assert infer_schema(path, opts).describe() == [("c1", "text"), ("c2", "text")]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(EmptySourceError) as exc:
            infer_schema(path)
        assert str(path) in str(exc.value)

    def test_embedded_newline_is_fatal(self, tmp_path):
        path = write_lines(tmp_path / "nl.csv", ["a,b,c", '1,"two', 'lines",3'])
        with pytest.raises(ColumnCountError):
            infer_schema(path)

    def test_duplicate_header(self, tmp_path):
        path = write_lines(tmp_path / "dup.csv", ["a,b,a", "1,2,3"])
        with pytest.raises(SchemaError) as exc:
            infer_schema(path)
        assert exc.value.column_name == "a"

    def test_prefix_rows_from_config(self, tmp_path):
        path = write_lines(tmp_path / "t.csv", ["n", "1", "2", "x"])
        schema = infer_schema(path, config=ReaderConfig(prefix_rows=2))
        assert schema.describe() == [("n", "int")]

    def test_tab_separated(self, tmp_path):
        path = write_lines(tmp_path / "t.tsv", ["a\tb", "1\ttrue"])
        opts = ParserOptions(column_separator="\t", quoting_mode=NoQuoting())
        assert infer_schema(path, opts).describe() == [("a", "int"), ("b", "bool")]


# ============================================================================
# Readers
# ============================================================================

class TestReaders:
    SCHEMA = Schema.of(("a", "int"), ("b", "int"), ("c", "int"))

    @pytest.fixture
    def mixed_csv(self, tmp_path) -> Path:
        return write_lines(tmp_path / "mixed.csv", ["a,b,c", "1,2,3", "1,notanumber,3", "7"])

    def test_read_table_strict(self, mixed_csv):
        assert list(read_table(mixed_csv, self.SCHEMA)) == [{"a": 1, "b": 2, "c": 3}]

    def test_read_table_maybe(self, mixed_csv):
        assert list(read_table_maybe(mixed_csv, self.SCHEMA)) == [
            {"a": 1, "b": 2, "c": 3},
            {"a": 1, "b": None, "c": 3},
            {"a": 7, "b": None, "c": None},
        ]

    def test_read_table_either(self, mixed_csv):
        rows = list(read_table_either(mixed_csv, self.SCHEMA))
        assert rows[1][1] == Fail("notanumber")
        assert rows[2][2] == Fail("")

    def test_read_table_debug(self, mixed_csv):
        side = io.StringIO()
        out = list(read_table_debug(mixed_csv, self.SCHEMA, stream=side))
        assert out == [{"a": 1, "b": 2, "c": 3}]
        assert side.getvalue().splitlines() == [
            '["Right 1","Left notanumber","Right 3"]',
            '["Right 7","Left ","Left "]',
        ]

    def test_read_table_closes_on_abandonment(self, tmp_path, closes):
        path = write_lines(tmp_path / "n.csv", ["n"] + [str(i) for i in range(100)])
        rows = read_table(path, Schema.of(("n", "int")))
        assert next(rows) == {"n": 0}
        rows.close()
        assert closes == [path]

    def test_infer_then_read(self, sample_csv):
        schema = infer_schema(sample_csv)
        assert list(read_table(sample_csv, schema)) == [
            {"a": 1, "b": Decimal("2.5"), "c": "x"},
            {"a": 2, "b": Decimal("3.5"), "c": "y"},
        ]
