"""Line-oriented stream editing engine.

Scripts are compiled once into a ``Program`` and then run over any iterable
of ``Line`` values::

    program = stream_engine.compile("2-3 s/a/b/g; $ =")
    result = program.run(StringSource("a\\na\\na\\n"), print_all=True)
"""

from .errors import (
    CompileError,
    EngineRuntimeError,
    InvalidAddressError,
    LineSourceError,
    MissingCharacterError,
    ShellEvaluationError,
    UnexpectedCharacterError,
)
from .program import Program, RunResult, Status
from .script import compile_file
from .script import compile_script as compile
from .source import FilesSource, Line, StdinSource, StringSource

__all__ = [
    "compile",
    "compile_file",
    "Program",
    "RunResult",
    "Status",
    "Line",
    "StringSource",
    "StdinSource",
    "FilesSource",
    "CompileError",
    "MissingCharacterError",
    "UnexpectedCharacterError",
    "InvalidAddressError",
    "EngineRuntimeError",
    "LineSourceError",
    "ShellEvaluationError",
]

__version__ = "0.1.0"
