"""Address variants deciding which lines a command block applies to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

import regex

from stream_engine.source import Line

# V1 scopes inline flags such as ``(?x)`` to the enclosing group, which is
# what the script's regex literal scanner assumes.
REGEX_FLAGS = regex.V1


@dataclass(frozen=True, slots=True)
class Regex:
    """Compiled regular expression that compares by its source text."""

    source: str
    compiled: regex.Pattern = field(compare=False, repr=False)

    @classmethod
    def compile(cls, source: str) -> "Regex":
        """Compile ``source``; raises ``regex.error`` for invalid patterns."""

        return cls(source=source, compiled=regex.compile(source, REGEX_FLAGS))

    def search(self, text: str) -> bool:
        return self.compiled.search(text) is not None

    def __str__(self) -> str:
        return self.source


@dataclass(frozen=True, slots=True)
class Always:
    def matches(self, line: Line) -> bool:
        return True

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True, slots=True)
class Final:
    """Never matches while lines are read; marks the finalize block."""

    def matches(self, line: Line) -> bool:
        return False

    def __str__(self) -> str:
        return "$"


@dataclass(frozen=True, slots=True)
class Location:
    index: int

    def matches(self, line: Line) -> bool:
        return line.index == self.index

    def __str__(self) -> str:
        return str(self.index)


@dataclass(frozen=True, slots=True)
class Pattern:
    regex: Regex

    def matches(self, line: Line) -> bool:
        return self.regex.search(line.text)

    def __str__(self) -> str:
        return f"/{self.regex}/"


@dataclass(frozen=True, slots=True)
class Deferred:
    """Stands for the pattern of the substitution that follows it.

    Compilation rewrites it into a ``Pattern``; it never reaches a running
    program.
    """

    def matches(self, line: Line) -> bool:
        raise RuntimeError("deferred address was not resolved during compilation")

    def __str__(self) -> str:
        return "?"


@dataclass(frozen=True, slots=True)
class Negate:
    inner: "Address"

    def matches(self, line: Line) -> bool:
        return not self.inner.matches(line)

    def __str__(self) -> str:
        return f"{self.inner}!"


@dataclass(slots=True)
class Range:
    """Stateful ``lhs-rhs`` range.

    ``inside`` is owned by the program holding this node and persists across
    lines; it takes no part in equality. Nodes are shared by reference, never
    copied, so the state driving the main loop is the only state.
    """

    lhs: "Address"
    rhs: "Address"
    inside: bool = field(default=False, compare=False)

    def matches(self, line: Line) -> bool:
        if self.inside:
            if self.rhs.matches(line):
                self.inside = False
            return True
        if self.lhs.matches(line):
            if not self.rhs.matches(line):
                self.inside = True
            return True
        return False

    def reset(self) -> None:
        self.inside = False

    def __str__(self) -> str:
        return f"{self.lhs}-{self.rhs}"


@dataclass(frozen=True, slots=True)
class AnySet:
    """Logical OR; members are evaluated in order and short-circuit."""

    members: tuple["Address", ...]

    def matches(self, line: Line) -> bool:
        return any(member.matches(line) for member in self.members)

    def __str__(self) -> str:
        return ", ".join(str(member) for member in self.members)


Address = Union[Always, Final, Location, Pattern, Deferred, Negate, Range, AnySet]


def negate(address: Address) -> Address:
    """Negate ``address``, collapsing a double negation to its operand."""

    if isinstance(address, Negate):
        return address.inner
    return Negate(address)


def any_of(addresses: Iterable[Address]) -> Address:
    """Build an OR-set, flattening nested sets and collapsing on ``Always``."""

    members: list[Address] = []
    for address in addresses:
        if isinstance(address, Always):
            return Always()
        if isinstance(address, AnySet):
            members.extend(address.members)
        else:
            members.append(address)
    if len(members) == 1:
        return members[0]
    return AnySet(tuple(members))


def iter_ranges(address: Address) -> Iterable[Range]:
    """Yield every ``Range`` node reachable from ``address``."""

    if isinstance(address, Range):
        yield address
        yield from iter_ranges(address.lhs)
        yield from iter_ranges(address.rhs)
    elif isinstance(address, Negate):
        yield from iter_ranges(address.inner)
    elif isinstance(address, AnySet):
        for member in address.members:
            yield from iter_ranges(member)


__all__ = [
    "REGEX_FLAGS",
    "Regex",
    "Address",
    "Always",
    "Final",
    "Location",
    "Pattern",
    "Deferred",
    "Negate",
    "Range",
    "AnySet",
    "negate",
    "any_of",
    "iter_ranges",
]
