"""Boundary detection for regular-expression literals embedded in scripts.

Two literal forms exist: ``/.../`` (delimiters dropped) and the whole-line
form ``^...$`` (anchors kept). The scanner does not compile anything; it only
decides where the literal ends, which requires tracking:

* escapes -- ``\\/`` turns into ``/``, every other ``\\x`` is copied verbatim;
* groups -- a delimiter inside ``(...)`` does not end the literal;
* character classes -- neither delimiters nor parentheses count inside
  ``[...]``;
* verbose mode -- after ``(?x)`` an unescaped ``#`` starts a comment that runs
  to the end of the line, delimiters included. The flag lasts until the end
  of the enclosing group; ``(?x:...)`` limits it to the inline body and
  ``(?-x)`` switches it off again.
"""

from __future__ import annotations

from stream_engine.errors import (
    CompileError,
    MissingCharacterError,
    UnexpectedCharacterError,
)

from .reader import ScriptReader

REGEX_OPENERS = ("/", "^")


def scan_regex(reader: ScriptReader) -> str:
    """Consume a regex literal starting at ``/`` or ``^`` and return its text."""

    opening = reader.advance()
    acc: list[str] = []
    if opening == "/":
        _read_until(reader, "/", False, acc)
        acc.pop()
    elif opening == "^":
        acc.append("^")
        _read_until(reader, "$", False, acc)
    elif opening is None:
        raise MissingCharacterError("/", position=reader.position)
    else:
        raise UnexpectedCharacterError(opening, position=reader.position)
    return "".join(acc)


def _read_escape(reader: ScriptReader, acc: list[str]) -> None:
    escaped = reader.advance()
    if escaped is None:
        raise CompileError("escaped character is missing", position=reader.position)
    if escaped != "/":
        acc.append("\\")
    acc.append(escaped)


def _read_until(reader: ScriptReader, delim: str, verbose: bool, acc: list[str]) -> None:
    while True:
        char = reader.advance()
        if char is None:
            raise MissingCharacterError(delim, position=reader.position)
        if char == delim:
            acc.append(char)
            return
        if char == "\\":
            _read_escape(reader, acc)
        elif char == "(":
            acc.append(char)
            verbose = _read_group(reader, verbose, acc)
        elif char == "[":
            acc.append(char)
            _read_class(reader, acc)
        elif char == "#" and verbose:
            acc.append(char)
            _read_comment(reader, acc)
        else:
            acc.append(char)


def _read_group(reader: ScriptReader, verbose: bool, acc: list[str]) -> bool:
    """Read the rest of a group; return the verbose flag for what follows it."""

    if not reader.next_is("?"):
        _read_until(reader, ")", verbose, acc)
        return verbose

    acc.append("?")
    local_verbose = verbose
    while True:
        char = reader.advance()
        if char is None:
            raise MissingCharacterError(")", position=reader.position)
        acc.append(char)
        if char == ":":
            _read_until(reader, ")", local_verbose, acc)
            return verbose
        if char == ")":
            return local_verbose
        if char == "x":
            local_verbose = True
        elif char == "-":
            if reader.next_is("x"):
                acc.append("x")
                local_verbose = False
        elif not char.isalpha():
            # lookaround, named group or inline comment: the rest is content
            _read_until(reader, ")", verbose, acc)
            return verbose


def _read_class(reader: ScriptReader, acc: list[str]) -> None:
    if reader.next_is("^"):
        acc.append("^")
    if reader.next_is("]"):
        acc.append("]")
    while True:
        char = reader.advance()
        if char is None:
            raise MissingCharacterError("]", position=reader.position)
        if char == "\\":
            _read_escape(reader, acc)
            continue
        acc.append(char)
        if char == "]":
            return
        if char == "[":
            if reader.next_is(":"):
                acc.append(":")
                _read_posix_class(reader, acc)
            else:
                _read_class(reader, acc)


def _read_posix_class(reader: ScriptReader, acc: list[str]) -> None:
    while True:
        char = reader.advance()
        if char is None:
            raise MissingCharacterError("]", position=reader.position)
        acc.append(char)
        if char == ":" and reader.next_is("]"):
            acc.append("]")
            return


def _read_comment(reader: ScriptReader, acc: list[str]) -> None:
    while True:
        char = reader.advance()
        if char is None:
            return
        acc.append(char)
        if char == "\n":
            return


__all__ = ["REGEX_OPENERS", "scan_regex"]
