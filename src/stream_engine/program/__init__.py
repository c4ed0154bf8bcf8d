"""Compiled program representation and the execution engine."""

from .actions import Action, Condition, Loop, dispatch
from .address import (
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
from .commands import (
    BREAK,
    NO_PRINT,
    NORMAL,
    Break,
    Command,
    Delete,
    Exchange,
    ExecutionContext,
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
    Status,
    Substitute,
)
from .memory import Memory
from .program import Program, RunResult

__all__ = [
    "Action",
    "Condition",
    "Loop",
    "dispatch",
    "Address",
    "Always",
    "AnySet",
    "Deferred",
    "Final",
    "Location",
    "Negate",
    "Pattern",
    "Range",
    "Regex",
    "any_of",
    "negate",
    "BREAK",
    "NO_PRINT",
    "NORMAL",
    "Status",
    "ExecutionContext",
    "Command",
    "Break",
    "Delete",
    "Exchange",
    "Get",
    "Hold",
    "Insert",
    "Join",
    "JoinLine",
    "Keep",
    "Print",
    "PrintEscaped",
    "PrintLine",
    "PrintLineNumber",
    "Quit",
    "ReadLines",
    "ReadReplace",
    "Reset",
    "ShellEval",
    "Substitute",
    "Memory",
    "Program",
    "RunResult",
]
