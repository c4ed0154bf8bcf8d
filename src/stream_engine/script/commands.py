"""Command parser: turns script text into ``Instruction`` records.

An instruction is an address followed by the commands it guards. Loop
bodies are parsed into ``LoopBlock`` nodes holding their own instruction
list; the compiler flattens both levels into actions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from stream_engine.errors import (
    CompileError,
    MissingCharacterError,
    UnexpectedCharacterError,
)
from stream_engine.program.address import Address
from stream_engine.program.commands import (
    Break,
    Command,
    Delete,
    Exchange,
    Get,
    Hold,
    Insert,
    Join,
    JoinLine,
    Keep,
    Print,
    PrintEscaped,
    PrintLine,
    PrintLineNumber,
    Quit,
    ReadLines,
    ReadReplace,
    Reset,
    ShellEval,
    Substitute,
)

from .addresses import parse_address
from .literals import (
    read_integer,
    read_quoted,
    read_regex,
    read_template,
    skip_line,
    skip_whitespace,
)
from .reader import ScriptPosition, ScriptReader

SIMPLE_COMMANDS: dict[str, Callable[[], Command]] = {
    "p": PrintLine,
    "P": Print,
    "l": PrintEscaped,
    "=": PrintLineNumber,
    "d": Delete,
    "z": Reset,
    "h": Hold,
    "g": Get,
    "x": Exchange,
    "j": JoinLine,
    "J": Join,
    "e": ShellEval,
    "R": ReadReplace,
}


@dataclass(slots=True)
class LoopBlock:
    """Parsed ``:{ ... }`` body, not yet flattened."""

    instructions: list["Instruction"] = field(default_factory=list)
    position: Optional[ScriptPosition] = None


Parsed = Union[Command, LoopBlock]


@dataclass(slots=True)
class Instruction:
    address: Address
    commands: list[Parsed] = field(default_factory=list)
    position: Optional[ScriptPosition] = None


def parse_instructions(reader: ScriptReader, *, nested: bool = False) -> list[Instruction]:
    """Parse instructions until end of script, or through ``}`` when nested."""

    instructions: list[Instruction] = []
    while True:
        skip_whitespace(reader)
        char = reader.peek()
        if char is None:
            if nested:
                raise MissingCharacterError("}", position=reader.position)
            return instructions
        if char == "}":
            reader.advance()
            if nested:
                return instructions
            raise UnexpectedCharacterError("}", position=reader.position)
        if char == "#":
            skip_line(reader)
            continue
        if char == ";":
            reader.advance()
            continue
        instructions.append(parse_instruction(reader))


def parse_instruction(reader: ScriptReader) -> Instruction:
    skip_whitespace(reader)
    position = reader.position
    address = parse_address(reader)
    skip_whitespace(reader)
    return Instruction(address, parse_commands(reader), position)


def parse_commands(reader: ScriptReader) -> list[Parsed]:
    """Parse commands up to ``;``, ``.``, ``}`` or the end of the script."""

    commands: list[Parsed] = []
    while True:
        char = reader.peek()
        if char is None or char == "}":
            break
        reader.advance()

        if char == ";":
            break
        if char == ".":
            commands.append(Break())
            break
        if char == "#":
            skip_line(reader)
            continue
        if char.isspace():
            continue

        factory = SIMPLE_COMMANDS.get(char)
        if factory is not None:
            commands.append(factory())
        elif char == "s":
            commands.append(_parse_substitute(reader))
        elif char == "k":
            skip_whitespace(reader)
            commands.append(_parse_keep(reader))
        elif char == "r":
            skip_whitespace(reader)
            commands.append(ReadLines(_read_count(reader, default=1)))
        elif char == "q":
            skip_whitespace(reader)
            commands.append(Quit(_read_count(reader, default=0)))
        elif char in ("'", '"'):
            commands.append(Insert(read_quoted(reader, char)))
        elif char == ":":
            commands.append(_parse_loop(reader))
        else:
            raise UnexpectedCharacterError(char, position=reader.position)
        skip_whitespace(reader)
    return commands


def _read_count(reader: ScriptReader, *, default: int) -> int:
    digits = read_integer(reader)
    return int(digits) if digits else default


def _parse_substitute(reader: ScriptReader) -> Substitute:
    if reader.peek() != "/":
        raise MissingCharacterError("/", position=reader.position)
    compiled = read_regex(reader)
    if compiled is None:
        raise CompileError("empty regular expression", position=reader.position)
    template = read_template(reader)

    limit = 0
    if not reader.next_is("g"):
        limit = _read_count(reader, default=0)
    return Substitute(compiled, template, limit)


def _parse_keep(reader: ScriptReader) -> Keep:
    digits = read_integer(reader)
    start = int(digits) if digits else 1
    if start == 0:
        raise CompileError("character indexes need to be >0", position=reader.position)

    if not reader.next_is("-"):
        return Keep(skip=start - 1, take=1)

    digits = read_integer(reader)
    if not digits:
        return Keep(skip=start - 1, take=None)
    end = int(digits)
    if end == 0 or end < start:
        raise CompileError(
            f"invalid character index range: {start}-{end}", position=reader.position
        )
    return Keep(skip=start - 1, take=end - start + 1)


def _parse_loop(reader: ScriptReader) -> LoopBlock:
    position = reader.position
    skip_whitespace(reader)
    reader.expect("{")
    return LoopBlock(parse_instructions(reader, nested=True), position)


__all__ = [
    "Instruction",
    "LoopBlock",
    "Parsed",
    "SIMPLE_COMMANDS",
    "parse_commands",
    "parse_instruction",
    "parse_instructions",
]
