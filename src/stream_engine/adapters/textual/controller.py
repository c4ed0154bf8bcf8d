"""Minimal Textual adapter that runs submitted scripts over sample lines."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from stream_engine.errors import CompileError, EngineRuntimeError
from stream_engine.program import RunResult
from stream_engine.runtime.shell import ShellExecutor
from stream_engine.script import compile_script
from stream_engine.source import iter_lines


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class PlaygroundHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_output: Callable[[str], None]
    update_status: Callable[[str], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


class TextualPlaygroundAdapter:
    """Bridges script submissions to a Textual-friendly surface."""

    def __init__(
        self,
        lines: Iterable[str],
        hooks: PlaygroundHooks,
        *,
        print_all: bool = False,
        shell: Optional[ShellExecutor] = None,
    ) -> None:
        self.lines = list(lines)
        self.hooks = hooks
        self.print_all = print_all
        self.shell = shell
        self.last_script = ""
        self.last_result: Optional[RunResult] = None
        self.hooks.update_output("\n".join(self.lines))

    def submit_script(self, script: str) -> Optional[RunResult]:
        """Compile ``script``, run it over the sample lines and show the output.

        Returns ``None`` when the script fails to compile or run; the error is
        reported through ``update_status`` instead.
        """

        self.last_script = script
        self._log_state("script ->", script=script)
        try:
            program = compile_script(script)
        except CompileError as exc:
            return self._report_error(f"compile error: {exc}")

        output = io.StringIO()
        try:
            result = program.run(
                iter_lines(self.lines),
                print_all=self.print_all,
                output=output,
                shell=self.shell,
            )
        except EngineRuntimeError as exc:
            return self._report_error(f"runtime error: {exc}")

        self.last_result = result
        self.hooks.update_output(output.getvalue())
        self.hooks.update_status(f"matches={result.matches} status={result.status}")
        self._log_state("result <-", matches=result.matches, status=result.status)
        return result

    def toggle_print_all(self) -> bool:
        """Flip ``print_all`` and re-run the last script, if any."""

        self.print_all = not self.print_all
        self._log_state("print_all", value=self.print_all)
        if self.last_script:
            self.submit_script(self.last_script)
        return self.print_all

    def _report_error(self, message: str) -> None:
        self.last_result = None
        self.hooks.update_status(message)
        self._log_state("error <-", message=message)
        return None

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        return {"lines": len(self.lines), "print_all": self.print_all}


__all__ = ["TextualPlaygroundAdapter", "PlaygroundHooks"]
