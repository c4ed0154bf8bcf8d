"""Executable Textual playground for trying scripts against a sample file."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when the playground is run
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Input, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package (pip install stream-engine[tui]) to use "
        "stream_engine.adapters.textual.app"
    ) from exc

from stream_engine.runtime import telemetry

from .controller import PlaygroundHooks, TextualPlaygroundAdapter


@dataclass
class UIState:
    output_text: str = ""
    status_text: str = ""


class PlaygroundApp(App[None]):
    """Script input on top, program output below, run status at the bottom."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#script-input {
		height: 3;
	}

	#output-view {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
		content-align: left top;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+a", "toggle_print_all", "Print all"),
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, lines: Sequence[str], *, print_all: bool = False) -> None:
        super().__init__()
        self._lines = list(lines)
        self._print_all = print_all
        self._state = UIState()
        self.adapter: TextualPlaygroundAdapter | None = None
        self._output_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Input(placeholder="script, e.g. /error/ p", id="script-input")
        with Vertical(id="output-area"):
            self._output_widget = Static("", id="output-view")
            yield self._output_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = PlaygroundHooks(
            update_output=self._update_output,
            update_status=self._update_status,
            log=self._log_line,
        )
        self.adapter = TextualPlaygroundAdapter(
            self._lines, hooks, print_all=self._print_all
        )
        self._update_status(f"{len(self._lines)} lines loaded")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if self.adapter:
            self.adapter.submit_script(event.value)

    def action_toggle_print_all(self) -> None:
        if self.adapter:
            enabled = self.adapter.toggle_print_all()
            if not self.adapter.last_script:
                self._update_status(f"print all: {'on' if enabled else 'off'}")

    def _update_output(self, text: str) -> None:
        self._state.output_text = text
        if self._output_widget:
            self._output_widget.update(text)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _log_line(self, line: str) -> None:
        telemetry.record_event("playground", level="debug", data={"line": line})


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="se-playground", description="Try stream engine scripts interactively."
    )
    parser.add_argument("file", type=Path, help="sample input file")
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="start with print-all mode enabled",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    lines = args.file.read_text(encoding="utf-8").splitlines()
    app = PlaygroundApp(lines, print_all=args.all)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
