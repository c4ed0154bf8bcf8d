from __future__ import annotations

import io
import os

import pytest

from stream_engine.errors import ShellEvaluationError
from stream_engine.program import Status
from stream_engine.runtime.shell import ShellResult, SubprocessShell
from stream_engine.script import compile_script
from stream_engine.source import StringSource

requires_sh = pytest.mark.skipif(
    not os.path.exists("/bin/sh"), reason="needs a POSIX shell"
)


@requires_sh
def test_subprocess_shell_captures_stdout() -> None:
    shell = SubprocessShell("/bin/sh")
    assert shell.execute("echo hi") == ShellResult(stdout="hi", exit_code=0)
    assert shell.execute("printf 'a\\nb\\n\\n'").stdout == "a\nb\n"


@requires_sh
def test_subprocess_shell_reports_exit_code() -> None:
    assert SubprocessShell("/bin/sh").execute("exit 3").exit_code == 3


@requires_sh
def test_subprocess_shell_rejects_invalid_utf8() -> None:
    with pytest.raises(ShellEvaluationError) as excinfo:
        SubprocessShell("/bin/sh").execute("printf '\\377'")
    assert excinfo.value.command == "printf '\\377'"


def test_missing_shell_binary() -> None:
    with pytest.raises(ShellEvaluationError) as excinfo:
        SubprocessShell("/nonexistent/shell").execute("true")
    assert isinstance(excinfo.value.__cause__, OSError)


@requires_sh
def test_engine_runs_pattern_through_real_shell() -> None:
    output = io.StringIO()
    result = compile_script("e").run(
        StringSource("echo one\nexit 4\necho never"),
        print_all=True,
        output=output,
        shell=SubprocessShell("/bin/sh"),
    )
    assert output.getvalue() == "one\n\n"
    assert result.status == Status.quit(4)
