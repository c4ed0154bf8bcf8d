"""Runtime services: telemetry and the shell boundary."""

from .shell import ShellExecutor, ShellResult, SubprocessShell

__all__ = ["ShellExecutor", "ShellResult", "SubprocessShell"]
