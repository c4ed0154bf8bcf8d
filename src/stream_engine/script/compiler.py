"""Assemble parsed instructions into a flat, jump-annotated ``Program``."""

from __future__ import annotations

import os
from typing import Optional, Sequence, Union

from stream_engine.errors import CompileError
from stream_engine.program.actions import Action, Condition, Loop
from stream_engine.program.address import (
    Address,
    AnySet,
    Deferred,
    Final,
    Negate,
    Pattern,
    Range,
)
from stream_engine.program.commands import Command, Substitute
from stream_engine.program.program import Program
from stream_engine.runtime import telemetry

from .commands import Instruction, LoopBlock, Parsed, parse_instructions
from .reader import FileReader, ScriptPosition, ScriptReader, StringReader

PathLike = Union[str, "os.PathLike[str]"]


def compile_script(script: str, *, name: str = "<script>") -> Program:
    """Compile script text; raises ``CompileError`` on any syntax problem."""

    return _compile(StringReader(script, name=name))


def compile_file(path: PathLike) -> Program:
    """Compile the script stored at ``path`` (read as UTF-8).

    ``OSError`` from opening the file propagates unchanged.
    """

    with open(path, encoding="utf-8") as handle:
        return _compile(FileReader(handle, name=os.fspath(path)))


def _compile(reader: ScriptReader) -> Program:
    with telemetry.span(
        "script::compile", component="parser", metadata={"script": reader.name}
    ) as handle:
        try:
            program = assemble(parse_instructions(reader))
        except CompileError as exc:
            telemetry.record_event(
                "script.compile_failed",
                level="warning",
                data={"script": reader.name, "error": str(exc)},
            )
            raise
        handle.add_metadata("actions", len(program.body))
        handle.add_metadata("finalize", len(program.finalize))
    return program


def assemble(instructions: Sequence[Instruction]) -> Program:
    """Flatten top-level instructions into a program body and finalize block."""

    body: list[Action] = []
    finalize: list[Command] = []
    _emit(instructions, body, finalize)
    return Program(body=body, finalize=finalize)


def _emit(
    instructions: Sequence[Instruction],
    body: list[Action],
    finalize: Optional[list[Command]],
) -> None:
    # finalize is None inside loop bodies
    for instruction in instructions:
        if isinstance(instruction.address, Final):
            if finalize is None:
                raise CompileError(
                    "final address is not allowed inside a loop",
                    position=instruction.position,
                )
            for parsed in instruction.commands:
                if isinstance(parsed, LoopBlock):
                    raise CompileError(
                        "loops are not allowed in the final block",
                        position=parsed.position,
                    )
                finalize.append(parsed)
            continue

        commands = [_build(parsed) for parsed in instruction.commands]
        address = resolve_deferred(instruction.address, commands, instruction.position)
        body.append(Condition(address, len(commands)))
        body.extend(commands)


def _build(parsed: Parsed) -> Command:
    if isinstance(parsed, LoopBlock):
        loop_body: list[Action] = []
        _emit(parsed.instructions, loop_body, None)
        return Loop(body=loop_body)
    return parsed


def resolve_deferred(
    address: Address,
    commands: Sequence[Command],
    position: Optional[ScriptPosition] = None,
) -> Address:
    """Replace every ``?`` in ``address`` with the first substitution's regex.

    The command list is left untouched so skip counts stay valid.
    """

    if not _contains_deferred(address):
        return address
    first = commands[0] if commands else None
    if not isinstance(first, Substitute):
        raise CompileError(
            "deferred address must be followed by a substitution", position=position
        )
    return _replace_deferred(address, Pattern(first.regex))


def _contains_deferred(address: Address) -> bool:
    if isinstance(address, Deferred):
        return True
    if isinstance(address, Negate):
        return _contains_deferred(address.inner)
    if isinstance(address, Range):
        return _contains_deferred(address.lhs) or _contains_deferred(address.rhs)
    if isinstance(address, AnySet):
        return any(_contains_deferred(member) for member in address.members)
    return False


def _replace_deferred(address: Address, pattern: Pattern) -> Address:
    if isinstance(address, Deferred):
        return pattern
    if isinstance(address, Negate):
        return Negate(_replace_deferred(address.inner, pattern))
    if isinstance(address, Range):
        return Range(
            _replace_deferred(address.lhs, pattern),
            _replace_deferred(address.rhs, pattern),
        )
    if isinstance(address, AnySet):
        return AnySet(
            tuple(_replace_deferred(member, pattern) for member in address.members)
        )
    return address


__all__ = ["assemble", "compile_file", "compile_script", "resolve_deferred"]
