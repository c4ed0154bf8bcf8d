"""Small lexical helpers shared by the address and command parsers."""

from __future__ import annotations

from typing import Optional

import regex

from stream_engine.errors import CompileError, MissingCharacterError
from stream_engine.program.address import Regex

from .reader import ScriptReader
from .regex_scanner import scan_regex

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "b": "\b",
    "f": "\f",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "/": "/",
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def skip_whitespace(reader: ScriptReader) -> None:
    while True:
        char = reader.peek()
        if char is None or not char.isspace():
            return
        reader.advance()


def skip_line(reader: ScriptReader) -> None:
    """Consume everything up to and including the next newline."""

    while True:
        char = reader.advance()
        if char is None or char == "\n":
            return


def read_integer(reader: ScriptReader) -> str:
    """Consume a run of ASCII digits; returns ``""`` when there is none."""

    digits: list[str] = []
    while True:
        char = reader.peek()
        if char is None or char not in "0123456789":
            break
        digits.append(char)
        reader.advance()
    return "".join(digits)


def read_regex(reader: ScriptReader) -> Optional[Regex]:
    """Scan and compile a regex literal; ``None`` for an empty literal."""

    source = scan_regex(reader)
    if not source:
        return None
    try:
        return Regex.compile(source)
    except regex.error as exc:
        raise CompileError(
            f"invalid regular expression /{source}/: {exc}", position=reader.position
        ) from exc


def read_quoted(reader: ScriptReader, quote: str) -> str:
    """Read a string literal whose opening ``quote`` was already consumed."""

    acc: list[str] = []
    while True:
        char = reader.advance()
        if char is None:
            break
        if char == quote:
            return unescape("".join(acc), reader)
        if char == "\\":
            escaped = reader.advance()
            if escaped is None:
                break
            if escaped != quote:
                acc.append(char)
            acc.append(escaped)
        else:
            acc.append(char)
    raise MissingCharacterError(quote, position=reader.position)


def read_template(reader: ScriptReader, delim: str = "/") -> str:
    """Read a substitution template up to the next unescaped ``delim``.

    Digits directly after ``$`` are wrapped in braces (``$1x`` becomes
    ``${1}x``) so the group number never swallows literal text that follows.
    """

    acc: list[str] = []
    while True:
        char = reader.advance()
        if char is None:
            break
        if char == delim:
            return unescape("".join(acc), reader)
        if char == "$":
            acc.append(char)
            if reader.next_is("$"):
                acc.append("$")
                continue
            digits = read_integer(reader)
            if digits:
                acc.append("{" + digits + "}")
        elif char == "\\":
            escaped = reader.advance()
            if escaped is None:
                break
            if escaped != delim:
                acc.append(char)
            acc.append(escaped)
        else:
            acc.append(char)
    raise MissingCharacterError(delim, position=reader.position)


def unescape(text: str, reader: Optional[ScriptReader] = None) -> str:
    """Decode backslash escapes (``\\n``, ``\\x41``, ``\\u{1F600}`` ...)."""

    if "\\" not in text:
        return text

    pieces: list[str] = []
    pos = 0
    while pos < len(text):
        char = text[pos]
        pos += 1
        if char != "\\":
            pieces.append(char)
            continue
        if pos >= len(text):
            raise _escape_error(text, reader)

        code = text[pos]
        pos += 1
        if code in _SIMPLE_ESCAPES:
            pieces.append(_SIMPLE_ESCAPES[code])
            continue

        if code == "x":
            digits = text[pos : pos + 2]
            pos += 2
        elif code == "u" and text.startswith("{", pos):
            end = text.find("}", pos)
            if end < 0:
                raise _escape_error(text, reader)
            digits = text[pos + 1 : end]
            if not 1 <= len(digits) <= 6:
                raise _escape_error(text, reader)
            pos = end + 1
        elif code == "u":
            digits = text[pos : pos + 4]
            if len(digits) != 4:
                raise _escape_error(text, reader)
            pos += 4
        else:
            raise _escape_error(text, reader)

        if not digits or not _HEX_DIGITS.issuperset(digits):
            raise _escape_error(text, reader)
        value = int(digits, 16)
        if code == "x" and (len(digits) != 2 or value > 0x7F):
            raise _escape_error(text, reader)
        if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
            raise _escape_error(text, reader)
        pieces.append(chr(value))
    return "".join(pieces)


def _escape_error(text: str, reader: Optional[ScriptReader]) -> CompileError:
    position = reader.position if reader is not None else None
    return CompileError(
        f"unrecognized escape characters in '{text}'", position=position
    )


__all__ = [
    "read_integer",
    "read_quoted",
    "read_regex",
    "read_template",
    "skip_line",
    "skip_whitespace",
    "unescape",
]
