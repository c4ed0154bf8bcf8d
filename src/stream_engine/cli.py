"""``se`` command line: compile a script and run it over files or stdin."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence, TextIO, Tuple

from stream_engine import __version__
from stream_engine.errors import CompileError, EngineRuntimeError
from stream_engine.program import Program
from stream_engine.runtime import telemetry
from stream_engine.script import compile_file, compile_script
from stream_engine.source import FilesSource, StdinSource

PROG = "se"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Apply a stream editing script to files or standard input.",
    )
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="print every line that was not deleted",
    )
    parser.add_argument(
        "-c",
        "--count",
        action="store_true",
        help="print the number of matching lines after the run",
    )
    parser.add_argument(
        "-f",
        "--file",
        metavar="SCRIPT_FILE",
        help="read the script from SCRIPT_FILE",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("script", nargs="?", metavar="SCRIPT", help="script to run")
    parser.add_argument("files", nargs="*", metavar="FILE", help="input files")
    return parser


_SHORT_FLAGS = "ach"


def _split_hyphen_script(argv: Sequence[str]) -> Tuple[Optional[str], List[str]]:
    """Pull a script such as ``-3p`` out of ``argv`` before argparse sees it.

    The script is the first token that is neither a known option nor an
    option value. Nothing is pulled out when the script comes from ``-f``.
    """

    tokens = list(argv)
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token == "--" or token == "-" or not token.startswith("-"):
            return None, tokens
        if token.startswith("--"):
            if token == "--file" or token.startswith("--file="):
                return None, tokens
            index += 1
            continue
        flags = token[1:].lstrip(_SHORT_FLAGS)
        if flags.startswith("f"):
            return None, tokens
        if flags:
            return token, tokens[:index] + tokens[index + 1 :]
        index += 1
    return None, tokens


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = _build_parser()
    script, remaining = _split_hyphen_script(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(remaining)
    if script is not None:
        if args.script is not None:
            args.files.insert(0, args.script)
        args.script = script
    if args.file is not None:
        # with -f the positional script slot holds the first input file
        if args.script is not None:
            args.files.insert(0, args.script)
            args.script = None
    elif args.script is None:
        parser.error("a SCRIPT or --file is required")
    return args


def _load_program(args: argparse.Namespace) -> Program:
    if args.file is not None:
        return compile_file(args.file)
    return compile_script(args.script)


def run(
    argv: Optional[Sequence[str]] = None,
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Run the command line and return the process exit code."""

    args = _parse_args(argv)
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr

    source = FilesSource(args.files) if args.files else StdinSource(stdin)
    try:
        program = _load_program(args)
        result = program.run(source, print_all=args.all, output=stdout)
    except (CompileError, EngineRuntimeError, OSError) as exc:
        telemetry.record_event(
            "cli.error", level="error", data={"kind": type(exc).__name__}
        )
        print(f"{PROG}: error: {exc}", file=stderr)
        return 1
    finally:
        if isinstance(source, FilesSource):
            source.close()

    if args.count:
        stdout.write(f"{result.matches}\n")
    stdout.flush()
    if result.status.is_quit:
        return result.status.code
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    return run(argv)


__all__ = ["main", "run"]
