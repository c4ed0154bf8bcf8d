"""Line sources consumed by programs."""

from .lines import FilesSource, Line, LineSource, StdinSource, StringSource, iter_lines

__all__ = [
    "Line",
    "LineSource",
    "iter_lines",
    "StringSource",
    "StdinSource",
    "FilesSource",
]
