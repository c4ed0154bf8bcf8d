"""Compiled program and the per-line execution loop."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Iterable, Optional, TextIO

from stream_engine.runtime import telemetry
from stream_engine.runtime.shell import ShellExecutor, SubprocessShell
from stream_engine.source import Line

from .actions import Action, Condition, Loop, dispatch
from .address import iter_ranges
from .commands import NORMAL, NO_PRINT, Command, ExecutionContext, Status
from .memory import Memory


@dataclass(frozen=True, slots=True)
class RunResult:
    """Final status of a run and the number of lines that matched."""

    status: Status
    matches: int


@dataclass(slots=True)
class Program:
    """Compiled script: the main body plus the finalize block.

    The body is immutable after compilation except for the ``inside`` flags of
    its ``Range`` addresses, which carry match state from line to line.
    """

    body: list[Action] = field(default_factory=list)
    finalize: list[Command] = field(default_factory=list)

    def run(
        self,
        source: Iterable[Line],
        *,
        print_all: bool = False,
        output: Optional[TextIO] = None,
        shell: Optional[ShellExecutor] = None,
    ) -> RunResult:
        """Apply the program to every line of ``source``.

        Lines are written to ``output`` (stdout by default) only through
        printing commands, or after each line when ``print_all`` is set. The
        finalize block runs once after the input is exhausted or a ``quit``
        is reached; failures of the source propagate and skip it.
        """

        self.reset()
        memory = Memory()
        context = ExecutionContext(
            memory=memory,
            source=iter(source),
            output=output if output is not None else sys.stdout,
            shell=shell if shell is not None else SubprocessShell(),
        )

        matches = 0
        status = NORMAL
        with telemetry.span(
            "program::run",
            component="engine",
            metadata={"actions": len(self.body), "print_all": print_all},
        ) as handle:
            while True:
                line = context.next_line()
                if line is None:
                    break
                memory.load(line)
                status = NORMAL

                outcome = dispatch(self.body, context)
                if outcome is not None:
                    status = outcome
                    matches += 1

                if status == NO_PRINT:
                    continue
                if print_all:
                    context.write(memory.pattern + "\n")
                if status.is_quit:
                    telemetry.record_event(
                        "program.quit",
                        level="debug",
                        data={"line": memory.index, "code": status.code},
                    )
                    break

            for command in self.finalize:
                outcome = command.execute(context)
                if not outcome.is_normal:
                    status = outcome
                    break

            handle.add_metadata("matches", matches)
            handle.add_metadata("status", status)
        return RunResult(status=status, matches=matches)

    def reset(self) -> None:
        """Clear the range state left behind by a previous run."""

        for address_range in _iter_program_ranges(self.body):
            address_range.reset()


def _iter_program_ranges(body: Iterable[Action]):
    for action in body:
        if isinstance(action, Condition):
            yield from iter_ranges(action.address)
        elif isinstance(action, Loop):
            yield from _iter_program_ranges(action.body)


__all__ = ["Program", "RunResult"]
