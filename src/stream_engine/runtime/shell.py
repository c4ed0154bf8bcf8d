"""Shell evaluation boundary used by the ``e`` command."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import Protocol

from stream_engine.errors import ShellEvaluationError

from .telemetry import ENV_PREFIX, record_event

DEFAULT_SHELL = os.getenv(f"{ENV_PREFIX}SHELL", "/bin/sh")


@dataclass(frozen=True, slots=True)
class ShellResult:
    """Captured standard output and exit code of one evaluation."""

    stdout: str
    exit_code: int


class ShellExecutor(Protocol):
    """Protocol describing how the engine hands command text to a shell."""

    def execute(self, command: str) -> ShellResult:
        """Run ``command`` and return its captured output and exit code."""
        ...


class SubprocessShell:
    """Runs commands through ``<shell> -c`` and inherits standard error."""

    def __init__(self, shell: str | None = None) -> None:
        self.shell = shell or DEFAULT_SHELL

    def execute(self, command: str) -> ShellResult:
        try:
            completed = subprocess.run(
                [self.shell, "-c", command],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                check=False,
            )
        except OSError as exc:
            raise ShellEvaluationError(
                f"cannot run shell '{self.shell}': {exc}", command=command
            ) from exc

        try:
            stdout = completed.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ShellEvaluationError(
                f"shell output is not valid UTF-8: {exc}", command=command
            ) from exc

        exit_code = completed.returncode
        if exit_code < 0:
            # killed by a signal, reported the way POSIX shells do
            exit_code = 128 - exit_code
        record_event(
            "shell.exit",
            level="debug",
            data={"shell": self.shell, "exit_code": exit_code},
        )
        return ShellResult(stdout=stdout.removesuffix("\n"), exit_code=exit_code)


__all__ = ["DEFAULT_SHELL", "ShellExecutor", "ShellResult", "SubprocessShell"]
