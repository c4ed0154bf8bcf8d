from __future__ import annotations

import io
from pathlib import Path

import pytest

from stream_engine.source import (
    FilesSource,
    Line,
    StdinSource,
    StringSource,
    iter_lines,
)


def test_string_source_strips_terminators() -> None:
    assert list(StringSource("a\r\nb\n")) == [Line(1, "a"), Line(2, "b")]


def test_iter_lines_custom_start() -> None:
    assert list(iter_lines(["x\r\n", "y"], start=5)) == [Line(5, "x"), Line(6, "y")]


def test_stdin_source_reads_stream() -> None:
    assert list(StdinSource(io.StringIO("a\n\nb"))) == [
        Line(1, "a"),
        Line(2, ""),
        Line(3, "b"),
    ]


def test_files_source_keeps_one_index(tmp_path: Path) -> None:
    first = tmp_path / "first.txt"
    second = tmp_path / "second.txt"
    first.write_text("a\nb\n", encoding="utf-8")
    second.write_text("c\r\nd", encoding="utf-8", newline="")
    source = FilesSource([first, second])
    assert list(source) == [Line(1, "a"), Line(2, "b"), Line(3, "c"), Line(4, "d")]


def test_files_source_missing_file(tmp_path: Path) -> None:
    present = tmp_path / "present.txt"
    present.write_text("a\n", encoding="utf-8")
    source = FilesSource([present, tmp_path / "missing.txt"])
    assert next(source) == Line(1, "a")
    with pytest.raises(OSError):
        next(source)


@pytest.mark.parametrize("index", [-1, 0])
def test_line_index_below_one_rejected(index: int) -> None:
    with pytest.raises(ValueError, match="starts at 1"):
        Line(index, "")
