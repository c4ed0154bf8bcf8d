"""Command vocabulary and the execution context commands run against."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Iterator, Literal, Optional, TextIO, Union

import regex

from stream_engine.errors import LineSourceError
from stream_engine.source import Line

from .address import Regex
from .memory import Memory

if TYPE_CHECKING:
    from stream_engine.runtime.shell import ShellExecutor

StatusKind = Literal["normal", "no_print", "break", "quit"]


@dataclass(frozen=True, slots=True)
class Status:
    """Control signal threaded through dispatch."""

    kind: StatusKind = "normal"
    code: int = 0

    @classmethod
    def quit(cls, code: int = 0) -> "Status":
        return cls("quit", code)

    @property
    def is_normal(self) -> bool:
        return self.kind == "normal"

    @property
    def is_quit(self) -> bool:
        return self.kind == "quit"

    def __str__(self) -> str:
        if self.kind == "quit":
            return f"quit({self.code})"
        return self.kind


NORMAL = Status()
NO_PRINT = Status("no_print")
BREAK = Status("break")


@dataclass(slots=True)
class ExecutionContext:
    """Services a command may touch while it runs."""

    memory: Memory
    source: Iterator[Line]
    output: TextIO
    shell: "ShellExecutor"

    def next_line(self) -> Optional[Line]:
        """Pull the next input line, or ``None`` once the source is exhausted."""

        try:
            return next(self.source)
        except StopIteration:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise LineSourceError(f"cannot read input: {exc}") from exc

    def write(self, text: str) -> None:
        self.output.write(text)


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

_ESCAPES = {
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
}


def escape_default(text: str) -> str:
    """Escape ``text`` so that every character is printable ASCII.

    Tabs, carriage returns, newlines, backslashes and quotes get their usual
    backslash forms; anything outside ``' '..'~'`` becomes ``\\u{hex}``.
    """

    pieces: list[str] = []
    for char in text:
        if char in _ESCAPES:
            pieces.append(_ESCAPES[char])
        elif " " <= char <= "~":
            pieces.append(char)
        else:
            pieces.append(f"\\u{{{ord(char):x}}}")
    return "".join(pieces)


@dataclass(frozen=True, slots=True)
class GroupRef:
    key: Union[int, str]


_GROUP_NAME = regex.compile(r"[_0-9A-Za-z]+")


def parse_template(template: str) -> tuple[Union[str, GroupRef], ...]:
    """Split a replacement template into literal text and group references.

    ``$N``/``${N}`` refer to numbered groups, ``$name``/``${name}`` to named
    ones and ``$$`` is a literal dollar. A ``$`` that starts no valid
    reference is kept as is.
    """

    parts: list[Union[str, GroupRef]] = []
    literal: list[str] = []
    pos = 0
    while pos < len(template):
        char = template[pos]
        if char != "$":
            literal.append(char)
            pos += 1
            continue

        if template.startswith("$$", pos):
            literal.append("$")
            pos += 2
            continue

        if template.startswith("${", pos):
            end = template.find("}", pos + 2)
            if end <= pos + 2:
                literal.append(char)
                pos += 1
                continue
            name = template[pos + 2 : end]
            pos = end + 1
        else:
            match = _GROUP_NAME.match(template, pos + 1)
            if match is None:
                literal.append(char)
                pos += 1
                continue
            name = match.group()
            pos = match.end()

        if literal:
            parts.append("".join(literal))
            literal.clear()
        parts.append(GroupRef(int(name) if name.isdigit() else name))

    if literal:
        parts.append("".join(literal))
    return tuple(parts)


def expand_template(parts: tuple[Union[str, GroupRef], ...], match: regex.Match) -> str:
    pieces: list[str] = []
    for part in parts:
        if isinstance(part, str):
            pieces.append(part)
            continue
        try:
            value = match.group(part.key)
        except IndexError:
            value = None
        pieces.append(value or "")
    return "".join(pieces)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class Command:
    """Base class for every command; ``execute`` returns the resulting status."""

    __slots__ = ()

    symbol: ClassVar[str] = ""

    def execute(self, context: ExecutionContext) -> Status:  # pragma: no cover - abstract
        raise NotImplementedError

    def __str__(self) -> str:
        return self.symbol


@dataclass(slots=True)
class PrintLine(Command):
    symbol: ClassVar[str] = "p"

    def execute(self, context: ExecutionContext) -> Status:
        context.write(context.memory.pattern + "\n")
        return NORMAL


@dataclass(slots=True)
class Print(Command):
    symbol: ClassVar[str] = "P"

    def execute(self, context: ExecutionContext) -> Status:
        context.write(context.memory.pattern)
        return NORMAL


@dataclass(slots=True)
class PrintEscaped(Command):
    symbol: ClassVar[str] = "l"

    def execute(self, context: ExecutionContext) -> Status:
        context.write(escape_default(context.memory.pattern) + "\n")
        return NORMAL


@dataclass(slots=True)
class PrintLineNumber(Command):
    symbol: ClassVar[str] = "="

    def execute(self, context: ExecutionContext) -> Status:
        context.write(str(context.memory.index))
        return NORMAL


@dataclass(slots=True)
class Insert(Command):
    text: str

    def execute(self, context: ExecutionContext) -> Status:
        context.write(self.text)
        return NORMAL

    def __str__(self) -> str:
        return f"'{self.text}'"


@dataclass(slots=True)
class Substitute(Command):
    """Replace the first ``limit`` matches (all of them when ``limit`` is 0)."""

    regex: Regex
    template: str
    limit: int = 0
    _parts: tuple[Union[str, GroupRef], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError("substitution limit cannot be negative")
        self._parts = parse_template(self.template)

    def execute(self, context: ExecutionContext) -> Status:
        memory = context.memory
        memory.pattern = self.regex.compiled.sub(
            lambda match: expand_template(self._parts, match),
            memory.pattern,
            count=self.limit,
        )
        return NORMAL

    def __str__(self) -> str:
        return f"s/{self.regex}/{self.template}/{self.limit}"


@dataclass(slots=True)
class Keep(Command):
    """Keep ``take`` characters starting at 0-based ``skip`` (to the end if None)."""

    skip: int = 0
    take: Optional[int] = 1

    def execute(self, context: ExecutionContext) -> Status:
        memory = context.memory
        end = None if self.take is None else self.skip + self.take
        memory.pattern = memory.pattern[self.skip : end]
        return NORMAL

    def __str__(self) -> str:
        if self.take is None:
            return f"k{self.skip + 1}-"
        return f"k{self.skip + 1}-{self.skip + self.take}"


@dataclass(slots=True)
class Reset(Command):
    symbol: ClassVar[str] = "z"

    def execute(self, context: ExecutionContext) -> Status:
        context.memory.pattern = ""
        return NORMAL


@dataclass(slots=True)
class Hold(Command):
    symbol: ClassVar[str] = "h"

    def execute(self, context: ExecutionContext) -> Status:
        context.memory.hold = context.memory.pattern
        return NORMAL


@dataclass(slots=True)
class Get(Command):
    symbol: ClassVar[str] = "g"

    def execute(self, context: ExecutionContext) -> Status:
        context.memory.pattern = context.memory.hold
        return NORMAL


@dataclass(slots=True)
class Exchange(Command):
    symbol: ClassVar[str] = "x"

    def execute(self, context: ExecutionContext) -> Status:
        context.memory.swap()
        return NORMAL


@dataclass(slots=True)
class JoinLine(Command):
    symbol: ClassVar[str] = "j"

    def execute(self, context: ExecutionContext) -> Status:
        context.memory.append_line(context.memory.hold)
        return NORMAL


@dataclass(slots=True)
class Join(Command):
    symbol: ClassVar[str] = "J"

    def execute(self, context: ExecutionContext) -> Status:
        context.memory.append_line(context.memory.hold, separator="")
        return NORMAL


@dataclass(slots=True)
class ReadLines(Command):
    """Append up to ``count`` more input lines, each after a newline."""

    count: int = 1

    def execute(self, context: ExecutionContext) -> Status:
        for _ in range(self.count):
            line = context.next_line()
            if line is None:
                break
            context.memory.append_line(line.text)
        return NORMAL

    def __str__(self) -> str:
        return f"r{self.count}"


@dataclass(slots=True)
class ReadReplace(Command):
    """Replace the current line with the next one; ``break`` at end of input."""

    symbol: ClassVar[str] = "R"

    def execute(self, context: ExecutionContext) -> Status:
        line = context.next_line()
        if line is None:
            return BREAK
        context.memory.load(line)
        return NORMAL


@dataclass(slots=True)
class ShellEval(Command):
    """Run the pattern buffer as a shell command and keep its output."""

    symbol: ClassVar[str] = "e"

    def execute(self, context: ExecutionContext) -> Status:
        result = context.shell.execute(context.memory.pattern)
        context.memory.pattern = result.stdout
        if result.exit_code != 0:
            return Status.quit(result.exit_code)
        return NORMAL


@dataclass(slots=True)
class Delete(Command):
    symbol: ClassVar[str] = "d"

    def execute(self, context: ExecutionContext) -> Status:
        context.memory.pattern = ""
        return NO_PRINT


@dataclass(slots=True)
class Break(Command):
    symbol: ClassVar[str] = "."

    def execute(self, context: ExecutionContext) -> Status:
        return BREAK


@dataclass(slots=True)
class Quit(Command):
    code: int = 0

    def execute(self, context: ExecutionContext) -> Status:
        return Status.quit(self.code)

    def __str__(self) -> str:
        return f"q{self.code}"


__all__ = [
    "StatusKind",
    "Status",
    "NORMAL",
    "NO_PRINT",
    "BREAK",
    "ExecutionContext",
    "escape_default",
    "GroupRef",
    "parse_template",
    "expand_template",
    "Command",
    "PrintLine",
    "Print",
    "PrintEscaped",
    "PrintLineNumber",
    "Insert",
    "Substitute",
    "Keep",
    "Reset",
    "Hold",
    "Get",
    "Exchange",
    "JoinLine",
    "Join",
    "ReadLines",
    "ReadReplace",
    "ShellEval",
    "Delete",
    "Break",
    "Quit",
]
