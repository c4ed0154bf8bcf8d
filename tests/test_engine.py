from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import pytest

from stream_engine.errors import LineSourceError
from stream_engine.program import (
    BREAK,
    NORMAL,
    Break,
    Command,
    ExecutionContext,
    Loop,
    Memory,
    Status,
)
from stream_engine.program.program import RunResult
from stream_engine.runtime.shell import ShellResult
from stream_engine.script import compile_script
from stream_engine.source import Line, StringSource


class FakeShell:
    def __init__(self, results: Optional[Dict[str, ShellResult]] = None) -> None:
        self.results = results or {}
        self.commands: List[str] = []

    def execute(self, command: str) -> ShellResult:
        self.commands.append(command)
        return self.results.get(command, ShellResult(stdout="", exit_code=0))


@dataclass(slots=True)
class Counter(Command):
    calls: int = 0

    def execute(self, context: ExecutionContext) -> Status:
        self.calls += 1
        return NORMAL


NUMBERED = "\n".join(str(index) for index in range(1, 11))


def run(
    script: str,
    text: str,
    *,
    print_all: bool = False,
    shell: Optional[FakeShell] = None,
) -> Tuple[str, RunResult]:
    output = io.StringIO()
    result = compile_script(script).run(
        StringSource(text),
        print_all=print_all,
        output=output,
        shell=shell or FakeShell(),
    )
    return output.getvalue(), result


def tracked(texts: List[str], seen: List[int]) -> Iterator[Line]:
    for index, text in enumerate(texts, start=1):
        seen.append(index)
        yield Line(index, text)


def test_deleting_selected_lines() -> None:
    output, result = run("1d;3d;7d", NUMBERED, print_all=True)
    assert output.splitlines() == ["2", "4", "5", "6", "8", "9", "10"]
    assert result.matches == 3
    assert result.status == NORMAL


def test_range_prints_inclusive_span() -> None:
    output, result = run("2-7 p", NUMBERED)
    assert output.splitlines() == ["2", "3", "4", "5", "6", "7"]
    assert result.matches == 6


def test_print_with_print_all_duplicates_lines() -> None:
    output, _ = run("p", "a\nb", print_all=True)
    assert output == "a\na\nb\nb\n"


def test_print_without_newline_and_line_numbers() -> None:
    output, _ = run("P =", "a\nb")
    assert output == "a1b2"


def test_escaped_print() -> None:
    output, _ = run("l", "a\tb\\é")
    assert output == "a\\tb\\\\\\u{e9}\n"


def test_insert_literal() -> None:
    output, _ = run("'> 'p", "a\nb")
    assert output == "> a\n> b\n"


def test_substitute_limits() -> None:
    assert run("s/a/b/", "aaa", print_all=True)[0] == "bbb\n"
    assert run("s/a/b/2", "aaa", print_all=True)[0] == "bba\n"


def test_substitute_group_references() -> None:
    output, _ = run(r"s/(\w+) (\w+)/$2 $1/", "hello world", print_all=True)
    assert output == "world hello\n"
    output, _ = run("s/(?P<x>a)/[${x}]/", "cat", print_all=True)
    assert output == "c[a]t\n"
    output, _ = run("s/(a)b/$1x/", "ab", print_all=True)
    assert output == "ax\n"


def test_substitute_missing_group_expands_to_empty() -> None:
    output, _ = run("s/(a)/$2/", "abc", print_all=True)
    assert output == "bc\n"


def test_substitute_literal_dollar() -> None:
    output, _ = run("s/a/$$/", "a", print_all=True)
    assert output == "$\n"


def test_keep_slices_by_character() -> None:
    assert run("k2-3", "héllo", print_all=True)[0] == "él\n"
    assert run("k3-", "héllo", print_all=True)[0] == "llo\n"
    assert run("k9", "héllo", print_all=True)[0] == "\n"


def test_hold_buffer_moves() -> None:
    assert run("1h; 2x", "a\nb", print_all=True)[0] == "a\na\n"
    assert run("1h; 2g", "a\nb", print_all=True)[0] == "a\na\n"
    assert run("1h; 2j", "a\nb", print_all=True)[0] == "a\nb\na\n"
    assert run("1h; 2J", "a\nb", print_all=True)[0] == "a\nba\n"
    assert run("z", "a\nb", print_all=True)[0] == "\n\n"


def test_read_lines_appends_and_keeps_index() -> None:
    output, result = run("1 r; =", "a\nb\nc")
    assert output == "13"
    assert result.matches == 2


def test_read_lines_stops_at_end_of_input() -> None:
    output, _ = run("r5", "a\nb", print_all=True)
    assert output == "a\nb\n"


def test_read_replace_moves_to_next_line() -> None:
    output, _ = run("1 R =", "a\nb\nc")
    assert output == "2"
    output, _ = run("1 R", "a\nb\nc", print_all=True)
    assert output == "b\nc\n"


def test_read_replace_at_end_of_input_breaks() -> None:
    output, result = run("R", "a", print_all=True)
    assert output == "a\n"
    assert result.status == BREAK


def test_quit_stops_reading() -> None:
    seen: List[int] = []
    output = io.StringIO()
    program = compile_script("2q")
    result = program.run(
        tracked(["1", "2", "3", "4"], seen), print_all=True, output=output
    )
    assert output.getvalue() == "1\n2\n"
    assert result.status == Status.quit(0)
    assert seen == [1, 2]


def test_quit_code() -> None:
    _, result = run("3 q5", NUMBERED)
    assert result.status == Status.quit(5)
    assert result.status.code == 5


def test_finalize_runs_after_input_and_after_quit() -> None:
    assert run("$ p", "a\nb")[0] == "b\n"
    assert run("$ =", NUMBERED)[0] == "10"
    output, _ = run(r"2q; $ 'end\n'", NUMBERED, print_all=True)
    assert output == "1\n2\nend\n"


def test_finalize_status_overrides() -> None:
    _, result = run("$ q3", "a")
    assert result.status == Status.quit(3)


def test_loop_with_only_break_runs_once() -> None:
    counter = Counter()
    loop = Loop(body=[counter, Break()])
    context = ExecutionContext(
        memory=Memory(), source=iter([]), output=io.StringIO(), shell=FakeShell()
    )
    assert loop.execute(context) == NORMAL
    assert counter.calls == 1


def test_loop_break_script_terminates() -> None:
    output, _ = run(":{ . }", "a\nb", print_all=True)
    assert output == "a\nb\n"


def test_loop_reads_until_pattern() -> None:
    output, result = run("1 :{ r; /c/ . }", "a\nb\nc\nd", print_all=True)
    assert output == "a\nb\nc\nd\n"
    assert result.matches == 1


def test_conditions_see_earlier_substitution() -> None:
    assert run("s/a/b/; /b/ p", "a")[0] == "b\n"
    assert run("s/a/b/; /a/ p", "a")[0] == ""


def test_conditions_see_text_restored_from_hold() -> None:
    output, _ = run("1h; 1d; 2g; /x/ p", "x\ny")
    assert output == "x\n"


def test_range_bounds_see_edited_text() -> None:
    output, result = run("s/a/b/; /b/-/z/ p", "a\nq\nz")
    assert output == "b\nq\nz\n"
    assert result.matches == 3


def test_loop_propagates_delete() -> None:
    output, _ = run("1 :{ d }", "a\nb", print_all=True)
    assert output == "b\n"


def test_range_state_resets_between_runs() -> None:
    program = compile_script("/start/-/end/ p")
    texts = "start\nx"
    for _ in range(2):
        output = io.StringIO()
        program.run(StringSource(texts), output=output)
        assert output.getvalue() == "start\nx\n"

    output = io.StringIO()
    program.run(StringSource("y\nz"), output=output)
    assert output.getvalue() == ""


def test_shell_eval_replaces_pattern() -> None:
    shell = FakeShell({"echo hi": ShellResult(stdout="hi", exit_code=0)})
    output, result = run("e", "echo hi", print_all=True, shell=shell)
    assert output == "hi\n"
    assert shell.commands == ["echo hi"]
    assert result.status == NORMAL


def test_shell_eval_failure_quits_with_exit_code() -> None:
    shell = FakeShell({"fail": ShellResult(stdout="", exit_code=4)})
    seen: List[int] = []
    output = io.StringIO()
    result = compile_script("2 e").run(
        tracked(["ok", "fail", "never"], seen),
        print_all=True,
        output=output,
        shell=shell,
    )
    assert result.status == Status.quit(4)
    assert seen == [1, 2]
    assert shell.commands == ["fail"]


def test_source_failure_aborts_without_finalize() -> None:
    def broken() -> Iterator[Line]:
        yield Line(1, "a")
        raise OSError("disk gone")

    output = io.StringIO()
    program = compile_script(r"$ 'done\n'")
    with pytest.raises(LineSourceError) as excinfo:
        program.run(broken(), print_all=True, output=output)
    assert isinstance(excinfo.value.__cause__, OSError)
    assert output.getvalue() == "a\n"
