"""Recursive-descent parser for instruction addresses.

Grammar::

    address := term (',' term)*
    term    := '(' address ')' '!'? | atom ('-' atom)? '!'?
    atom    := integer | regex | '*' | '$' | '?'

A missing atom means ``*``; in a range the left side defaults to line 1 and
the right side to the end of input.
"""

from __future__ import annotations

from typing import Optional

from stream_engine.errors import InvalidAddressError
from stream_engine.program.address import (
    Address,
    Always,
    Deferred,
    Final,
    Location,
    Pattern,
    Range,
    any_of,
    negate,
)

from .literals import read_integer, read_regex, skip_line, skip_whitespace
from .reader import ScriptReader
from .regex_scanner import REGEX_OPENERS


def parse_address(reader: ScriptReader) -> Address:
    terms: list[Address] = []
    while True:
        terms.append(_parse_term(reader))
        skip_whitespace(reader)
        if not reader.next_is(","):
            break
        skip_whitespace(reader)
    return any_of(terms)


def _parse_term(reader: ScriptReader) -> Address:
    if reader.next_is("("):
        skip_whitespace(reader)
        address = parse_address(reader)
        skip_whitespace(reader)
        reader.expect(")")
    else:
        address = _parse_range(reader)
    skip_whitespace(reader)
    if reader.next_is("!"):
        return negate(address)
    return address


def _parse_range(reader: ScriptReader) -> Address:
    lhs = _parse_atom(reader)
    skip_whitespace(reader)
    if not reader.next_is("-"):
        return lhs if lhs is not None else Always()

    skip_whitespace(reader)
    rhs = _parse_atom(reader)
    if lhs is None:
        lhs = Location(1)
    if rhs is None:
        rhs = Final()
    if isinstance(lhs, Location) and isinstance(rhs, Location) and lhs.index > rhs.index:
        raise InvalidAddressError(
            f"{lhs.index} > {rhs.index} in {lhs.index}-{rhs.index}",
            position=reader.position,
        )
    return Range(lhs, rhs)


def _parse_atom(reader: ScriptReader) -> Optional[Address]:
    while reader.peek() == "#":
        skip_line(reader)
        skip_whitespace(reader)

    char = reader.peek()
    if char is None:
        return None
    if char in REGEX_OPENERS:
        compiled = read_regex(reader)
        return Always() if compiled is None else Pattern(compiled)
    if char in "0123456789":
        digits = read_integer(reader)
        index = int(digits)
        if index == 0:
            raise InvalidAddressError(digits, position=reader.position)
        return Location(index)
    if char == "*":
        reader.advance()
        return Always()
    if char == "$":
        reader.advance()
        return Final()
    if char == "?":
        reader.advance()
        return Deferred()
    return None


__all__ = ["parse_address"]
