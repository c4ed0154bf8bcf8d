from __future__ import annotations

from typing import List

import pytest

from stream_engine.errors import InvalidAddressError, MissingCharacterError
from stream_engine.program.address import (
    Address,
    Always,
    AnySet,
    Deferred,
    Final,
    Location,
    Negate,
    Pattern,
    Range,
    Regex,
    any_of,
    negate,
)
from stream_engine.script import StringReader, parse_address
from stream_engine.source import Line


def parse(text: str) -> Address:
    return parse_address(StringReader(text))


def match_lines(address: Address, texts: List[str]) -> List[bool]:
    return [address.matches(Line(index, text)) for index, text in enumerate(texts, 1)]


def numbered(count: int) -> List[str]:
    return [str(index) for index in range(1, count + 1)]


def test_simple_atoms() -> None:
    assert parse("42") == Location(42)
    assert parse("*") == Always()
    assert parse("") == Always()
    assert parse("$") == Final()
    assert parse("?") == Deferred()
    assert parse("/abc/") == Pattern(Regex.compile("abc"))


def test_empty_regex_means_always() -> None:
    assert parse("//") == Always()


def test_location_zero_is_invalid() -> None:
    with pytest.raises(InvalidAddressError):
        parse("0")


def test_range_bounds_and_defaults() -> None:
    assert parse("13-72") == Range(Location(13), Location(72))
    assert parse("13 -   72") == Range(Location(13), Location(72))
    assert parse("-") == Range(Location(1), Final())
    assert parse("-5") == Range(Location(1), Location(5))
    assert parse("3-") == Range(Location(3), Final())
    assert parse("/abc/-/def/") == Range(
        Pattern(Regex.compile("abc")), Pattern(Regex.compile("def"))
    )


def test_reversed_literal_range_is_rejected() -> None:
    with pytest.raises(InvalidAddressError, match="7 > 3"):
        parse("7-3")


def test_range_equality_ignores_state() -> None:
    active = Range(Location(1), Location(2))
    active.inside = True
    assert active == Range(Location(1), Location(2))


def test_numeric_range_matches_inclusive_span() -> None:
    address = parse("2-7")
    assert match_lines(address, numbered(10)) == [
        False,
        True,
        True,
        True,
        True,
        True,
        True,
        False,
        False,
        False,
    ]


def test_pattern_range_reopens() -> None:
    address = parse("/start/-/end/")
    texts = ["a", "start", "b", "end", "c", "start", "d"]
    assert match_lines(address, texts) == [False, True, True, True, False, True, True]


def test_range_closing_on_opening_line_stays_outside() -> None:
    address = parse("/x/-/x/")
    assert match_lines(address, ["x", "a", "x"]) == [True, False, True]


def test_negation_and_double_negation() -> None:
    assert parse("666 !") == Negate(Location(666))
    assert parse("(1!)!") == Location(1)
    assert parse("13-72!") == Negate(Range(Location(13), Location(72)))
    assert match_lines(parse("2!"), numbered(3)) == [True, False, True]


def test_sets_flatten_through_brackets() -> None:
    expected = AnySet((Location(5), Location(6), Location(10)))
    assert parse("5,6,10") == expected
    assert parse("((5),((6),10))") == expected
    assert parse("5, 6  ,10") == expected
    assert parse("(((42)))") == Location(42)


def test_set_negates_last_term_only() -> None:
    assert parse("5,6,10!") == AnySet((Location(5), Location(6), Negate(Location(10))))


def test_set_with_always_collapses() -> None:
    assert parse("1,*") == Always()


def test_set_short_circuits_before_range_state() -> None:
    address = parse("1, 1-2")
    assert match_lines(address, numbered(3)) == [True, False, False]


def test_comment_before_atom() -> None:
    assert parse("# first line only\n4") == Location(4)


def test_unclosed_bracket() -> None:
    with pytest.raises(MissingCharacterError):
        parse("(1")


def test_helpers_collapse() -> None:
    assert negate(negate(Location(3))) == Location(3)
    assert any_of([Location(1)]) == Location(1)
    assert any_of([AnySet((Location(1), Location(2))), Location(3)]) == AnySet(
        (Location(1), Location(2), Location(3))
    )


def test_final_never_matches_lines() -> None:
    assert match_lines(Final(), numbered(3)) == [False, False, False]
