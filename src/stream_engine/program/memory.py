"""Run state shared by every command: current line plus the two buffers."""

from __future__ import annotations

from dataclasses import dataclass

from stream_engine.source import Line


@dataclass(slots=True)
class Memory:
    """Mutable pattern/hold buffers tied to the line being edited.

    ``index`` is 0 until the first line is loaded.
    """

    index: int = 0
    pattern: str = ""
    hold: str = ""

    @property
    def line(self) -> Line:
        """The current line as commands have left it.

        Its text is the pattern buffer, so conditions see earlier edits.
        """

        if self.index == 0:
            raise RuntimeError("no line has been loaded")
        return Line(self.index, self.pattern)

    def load(self, line: Line) -> None:
        """Make ``line`` current and copy its text into the pattern buffer."""

        self.index = line.index
        self.pattern = line.text

    def append_line(self, text: str, *, separator: str = "\n") -> None:
        self.pattern = f"{self.pattern}{separator}{text}"

    def swap(self) -> None:
        self.pattern, self.hold = self.hold, self.pattern


__all__ = ["Memory"]
