"""Character cursors over scripts held in memory or in a file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, TextIO

from stream_engine.errors import (
    CompileError,
    MissingCharacterError,
    UnexpectedCharacterError,
)


@dataclass(frozen=True, slots=True)
class ScriptPosition:
    """1-based location of the last character consumed from a script."""

    line: int
    column: int
    source: str = "<script>"

    def __str__(self) -> str:
        return f"{self.source}:{self.line}:{self.column}"


class ScriptReader:
    """Peek/advance cursor shared by every parser function.

    Subclasses provide text through ``_refill``; the base class keeps the
    current chunk and tracks line/column positions for diagnostics.
    """

    def __init__(self, *, name: str = "<script>") -> None:
        self.name = name
        self._chunk = ""
        self._offset = 0
        self._line = 1
        self._column = 0

    def _refill(self) -> bool:
        """Load more text into ``_chunk``; return ``False`` at end of script."""

        return False

    def _ensure(self) -> bool:
        while self._offset >= len(self._chunk):
            if not self._refill():
                return False
        return True

    def peek(self) -> Optional[str]:
        if not self._ensure():
            return None
        return self._chunk[self._offset]

    def advance(self) -> Optional[str]:
        if not self._ensure():
            return None
        char = self._chunk[self._offset]
        self._offset += 1
        if char == "\n":
            self._line += 1
            self._column = 0
        else:
            self._column += 1
        return char

    def next_is(self, value: str) -> bool:
        """Consume the next character only if it equals ``value``."""

        if self.peek() == value:
            self.advance()
            return True
        return False

    def expect(self, value: str) -> None:
        char = self.advance()
        if char is None:
            raise MissingCharacterError(value, position=self.position)
        if char != value:
            raise UnexpectedCharacterError(char, position=self.position)

    def at_end(self) -> bool:
        return self.peek() is None

    @property
    def position(self) -> ScriptPosition:
        return ScriptPosition(self._line, self._column, self.name)


class StringReader(ScriptReader):
    """Reader over an in-memory script."""

    def __init__(self, text: str, *, name: str = "<script>") -> None:
        super().__init__(name=name)
        self._chunk = text


class FileReader(ScriptReader):
    """Reader that pulls one physical line at a time from an open file.

    Every line is handed out with a trailing newline so that a script may
    span several lines of the file.
    """

    def __init__(self, handle: TextIO, *, name: Optional[str] = None) -> None:
        super().__init__(name=name or getattr(handle, "name", "<file>"))
        self._lines: Iterator[str] = iter(handle)

    def _refill(self) -> bool:
        try:
            raw = next(self._lines, None)
        except UnicodeDecodeError as exc:
            raise CompileError(
                f"script is not valid UTF-8: {exc.reason}", position=self.position
            ) from exc
        if raw is None:
            return False
        self._chunk = raw.removesuffix("\n").removesuffix("\r") + "\n"
        self._offset = 0
        return True


__all__ = ["ScriptPosition", "ScriptReader", "StringReader", "FileReader"]
