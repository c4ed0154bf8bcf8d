"""Flat instruction stream: conditions with skip counts, commands, and loops.

A compiled body is a list where every ``Condition`` is followed by the
commands it guards. ``Condition.skip`` is exactly the number of those
commands, so a failed condition jumps over its whole block::

    1d;3d  ->  [Condition(Location(1), 1), Delete(),
                Condition(Location(3), 1), Delete()]

``dispatch`` walks such a list with an instruction pointer. ``Loop`` nests a
second list and re-enters ``dispatch`` on it until something breaks out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from .address import Address
from .commands import BREAK, NORMAL, Command, ExecutionContext, Status


@dataclass(slots=True)
class Condition:
    address: Address
    skip: int

    def __post_init__(self) -> None:
        if self.skip < 0:
            raise ValueError("skip count cannot be negative")

    def __str__(self) -> str:
        return f"{self.address} [{self.skip}]"


Action = Union[Condition, Command]


def dispatch(body: Sequence[Action], context: ExecutionContext) -> Optional[Status]:
    """Run ``body`` once against ``context``.

    Returns ``None`` when no condition matched and every command completed
    normally; otherwise the status that ended the walk (``NORMAL`` if it ran
    to the end after at least one match).
    """

    status: Optional[Status] = None
    pos = 0
    while pos < len(body):
        action = body[pos]
        if isinstance(action, Condition):
            if action.address.matches(context.memory.line):
                status = NORMAL
            else:
                pos += action.skip
        else:
            outcome = action.execute(context)
            if not outcome.is_normal:
                return outcome
        pos += 1
    return status


@dataclass(slots=True)
class Loop(Command):
    """``:{ ... }`` -- repeat the nested body until it signals ``break``.

    ``break`` is absorbed here and the enclosing body continues; ``no_print``
    and ``quit`` leave the loop and keep propagating.
    """

    body: list[Action] = field(default_factory=list)

    def execute(self, context: ExecutionContext) -> Status:
        while True:
            outcome = dispatch(self.body, context)
            if outcome is None or outcome.is_normal:
                continue
            if outcome == BREAK:
                return NORMAL
            return outcome

    def __str__(self) -> str:
        inner = "; ".join(str(action) for action in self.body)
        return f":{{ {inner} }}"


__all__ = ["Action", "Condition", "Loop", "dispatch"]
