"""Line sources feeding the engine: strings, stdin, and file lists."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, TextIO, Union

PathLike = Union[str, Path]


@dataclass(frozen=True, slots=True)
class Line:
    """A single input line; ``index`` starts at 1."""

    index: int
    text: str

    def __post_init__(self) -> None:
        if self.index < 1:
            raise ValueError("line index starts at 1")


# Forward-only and consumed once; commands such as ``r`` pull from the same
# iterator as the main loop.
LineSource = Iterator[Line]


def _strip_terminator(raw: str) -> str:
    return raw.removesuffix("\n").removesuffix("\r")


def iter_lines(stream: Iterable[str], *, start: int = 1) -> Iterator[Line]:
    """Yield numbered lines from a text stream, dropping line terminators."""

    index = start
    for raw in stream:
        yield Line(index, _strip_terminator(raw))
        index += 1


class StringSource:
    """Serves the lines of an in-memory string."""

    def __init__(self, text: str) -> None:
        self._lines = iter_lines(text.splitlines())

    def __iter__(self) -> "StringSource":
        return self

    def __next__(self) -> Line:
        return next(self._lines)


class StdinSource:
    """Serves lines from standard input (or any text stream)."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._lines = iter_lines(stream if stream is not None else sys.stdin)

    def __iter__(self) -> "StdinSource":
        return self

    def __next__(self) -> Line:
        return next(self._lines)


class FilesSource:
    """Serves the lines of several files in order with one running index.

    Files are opened lazily, one at a time; an unreadable file raises
    ``OSError`` when iteration reaches it.
    """

    def __init__(self, paths: Sequence[PathLike], *, encoding: str = "utf-8") -> None:
        self._pending = [Path(path) for path in paths]
        self._encoding = encoding
        self._handle: Optional[TextIO] = None
        self._counter = 0

    def __iter__(self) -> "FilesSource":
        return self

    def __next__(self) -> Line:
        while True:
            if self._handle is None:
                if not self._pending:
                    raise StopIteration
                self._handle = open(
                    self._pending.pop(0), "r", encoding=self._encoding, newline=""
                )
            raw = self._handle.readline()
            if raw:
                self._counter += 1
                return Line(self._counter, _strip_terminator(raw))
            self.close()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


__all__ = [
    "Line",
    "LineSource",
    "iter_lines",
    "StringSource",
    "StdinSource",
    "FilesSource",
]
