from __future__ import annotations

import pytest

from stream_engine.errors import CompileError, MissingCharacterError
from stream_engine.script import StringReader, scan_regex


def scan(text: str) -> str:
    return scan_regex(StringReader(text))


def test_slash_literal_drops_delimiters() -> None:
    assert scan("/abc/") == "abc"


def test_escaped_slash_is_unescaped() -> None:
    assert scan(r"/abc\//") == "abc/"
    assert scan(r"/abc\/123/") == "abc/123"


def test_other_escapes_pass_through() -> None:
    assert scan(r"/a\d+\s/") == r"a\d+\s"


def test_whole_line_literal_keeps_anchors() -> None:
    assert scan("^abc$") == "^abc$"
    assert scan(r"^\$abc$") == r"^\$abc$"
    assert scan(r"^\$$") == r"^\$$"


def test_reader_stops_right_after_literal() -> None:
    reader = StringReader("/ab/p")
    assert scan_regex(reader) == "ab"
    assert reader.peek() == "p"


def test_delimiter_inside_group_does_not_end_literal() -> None:
    assert scan("/a(b/c)d/") == "a(b/c)d"


def test_delimiter_inside_class_does_not_end_literal() -> None:
    assert scan("/[/)]x/") == "[/)]x"
    assert scan("/[]/]/") == "[]/]"


def test_lookaround_group_is_scanned_as_content() -> None:
    assert scan("/(?=a/b)c/") == "(?=a/b)c"


def test_verbose_comment_is_copied_verbatim() -> None:
    assert scan("/(?x) a # comment /\n b/") == "(?x) a # comment /\n b"


def test_verbose_can_be_cancelled_inside_group() -> None:
    text = "/(?x) abc ((?-x) #/# ) # /comment//\n        end/"
    assert scan(text) == "(?x) abc ((?-x) #/# ) # /comment//\n        end"


def test_negated_verbose_keeps_hash_literal() -> None:
    assert scan("/(?-x)#/") == "(?-x)#"


def test_inline_verbose_group_is_scoped_to_its_body() -> None:
    assert scan("/(?x: a #/\n)#b/") == "(?x: a #/\n)#b"


def test_missing_closing_delimiter() -> None:
    with pytest.raises(MissingCharacterError) as excinfo:
        scan("/abc")
    assert excinfo.value.character == "/"


def test_missing_group_close() -> None:
    with pytest.raises(MissingCharacterError) as excinfo:
        scan("/a(bc/")
    assert excinfo.value.character == ")"


def test_missing_anchor_close() -> None:
    with pytest.raises(MissingCharacterError) as excinfo:
        scan("^abc")
    assert excinfo.value.character == "$"


def test_trailing_backslash_is_an_error() -> None:
    with pytest.raises(CompileError, match="escaped character is missing"):
        scan("/abc\\")
