"""Error types raised while compiling scripts and running programs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from stream_engine.script.reader import ScriptPosition


class CompileError(ValueError):
    """Raised when a script cannot be turned into a program.

    Compile errors are fatal before any input is read; no partial program is
    ever produced.
    """

    def __init__(
        self,
        message: str,
        *,
        position: Optional["ScriptPosition"] = None,
        character: Optional[str] = None,
    ) -> None:
        self.message = message
        self.position = position
        self.character = character
        if position is not None:
            message = f"{message} at {position}"
        super().__init__(message)


class MissingCharacterError(CompileError):
    """The script ended (or went elsewhere) before an expected delimiter."""

    def __init__(
        self, character: str, *, position: Optional["ScriptPosition"] = None
    ) -> None:
        super().__init__(
            f"missing '{character}'", position=position, character=character
        )


class UnexpectedCharacterError(CompileError):
    def __init__(
        self, character: str, *, position: Optional["ScriptPosition"] = None
    ) -> None:
        super().__init__(
            f"unexpected '{character}'", position=position, character=character
        )


class InvalidAddressError(CompileError):
    def __init__(
        self, address: str, *, position: Optional["ScriptPosition"] = None
    ) -> None:
        super().__init__(f"invalid address: {address}", position=position)
        self.address = address


class EngineRuntimeError(RuntimeError):
    """Base class for failures that abort a running program."""


class LineSourceError(EngineRuntimeError):
    """Reading the next input line failed (I/O or decoding)."""


class ShellEvaluationError(EngineRuntimeError):
    """The ``e`` command could not spawn the shell or decode its output."""

    def __init__(self, message: str, *, command: str | None = None) -> None:
        super().__init__(message)
        self.command = command


__all__ = [
    "CompileError",
    "MissingCharacterError",
    "UnexpectedCharacterError",
    "InvalidAddressError",
    "EngineRuntimeError",
    "LineSourceError",
    "ShellEvaluationError",
]
