from pathlib import Path
from typing import List

from loguru import logger
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import Footer

from ..engine import CheckEngine
from ..errors import UnsupportedSource
from ..parsing.diagnostics import MappedDiagnostic
from ..session import SessionState
from ..utils.config import ConfigManager
from ..utils.lang import detect_kind, source_label
from ..utils.state import CheckState
from ..utils.watcher import FileWatcher
from .diagnostic_peek import DiagnosticPeekPanel
from .widgets import SourceLine, StatusBar

# Palette
C_BG = "#EBEEEE"
C_TEXT = "#191A1A"
C_ACCENT1 = "#45d3ee"
C_ACCENT2 = "#9FBFC5"
C_ERROR = "#a80000"


class SourceScroll(VerticalScroll): BINDINGS = []


class GamsCheckApp(App):
    """Read-only source view with live compiler diagnostics."""

    CSS = f"""
    Screen {{
        background: {C_BG};
        color: {C_TEXT};
    }}

    #source-container-outer {{
        height: 1fr;
        width: 100%;
        border: solid {C_ACCENT2};
        border-title-color: {C_TEXT};
        margin: 1 1;
    }}

    #source-container {{ height: 1fr; width: 1fr; }}

    SourceLine {{ width: 100%; height: 1; }}
    SourceLine.has-error {{ background: #f8d7da; }}
    SourceLine.cursor    {{ background: {C_ACCENT2}; }}

    StatusBar {{ height: 1; dock: bottom; background: {C_TEXT}; color: {C_ACCENT1}; padding: 0 1; }}
    Footer {{ background: {C_TEXT}; color: {C_ACCENT1}; }}
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("r", "recheck", "Recheck", show=True),
        Binding("n", "next_error", "Next error", show=True),
        Binding("p", "prev_error", "Prev error", show=True),
        Binding("up", "cursor_up", "Up", show=False, priority=True),
        Binding("down", "cursor_down", "Down", show=False, priority=True),
        Binding("k", "cursor_up", show=False, priority=True),
        Binding("j", "cursor_down", show=False, priority=True),
    ]

    class Reported(Message):
        def __init__(self, diagnostics: List[MappedDiagnostic]) -> None:
            super().__init__()
            self.diagnostics = diagnostics

    def __init__(self, source_file: str, config: ConfigManager | None = None):
        super().__init__()
        self.config_manager = config if config else ConfigManager()
        self.engine = CheckEngine(self.config_manager)
        self.watcher = FileWatcher(self.config_manager.get("debounce_seconds", 0.5))
        self.state = CheckState(source_path=str(Path(source_file).resolve()))
        self._cursor = 0
        self._generation = 0

    def compose(self) -> ComposeResult:
        outer = Vertical(SourceScroll(id="source-container"), id="source-container-outer")
        outer.border_title = source_label(detect_kind(self.state.source_path))
        yield outer
        yield DiagnosticPeekPanel(id="diag-peek")
        yield StatusBar()
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(StatusBar).set_status(file=Path(self.state.source_path).name)
        self.watcher.start_watching(self.state.source_path, self._on_file_saved)
        self.action_recheck()

    def on_unmount(self) -> None:
        self.watcher.stop_watching()
        self.engine.shutdown()

    # --- Checking ---

    def _on_file_saved(self, path: str) -> None:
        # Called from the watchdog thread.
        self.call_from_thread(self.action_recheck)

    def _on_report(self, diagnostics: List[MappedDiagnostic]) -> None:
        self.post_message(self.Reported(diagnostics))

    def action_recheck(self) -> None:
        self._load_source()
        self.run_worker(self._check(), group="check")

    async def _check(self) -> None:
        status_bar = self.query_one(StatusBar)
        status_bar.set_status(status="checking", note="")
        try:
            session = await self.engine.check(self.state.source_path, self._on_report)
        except UnsupportedSource as e:
            status_bar.set_status(status="disabled", note=str(e))
            return

        if session.state == SessionState.SUPERSEDED:
            return
        self.state.session_id = session.session_id
        self.state.session_state = session.state
        self.state.error_message = str(session.error) if session.error else ""
        status_bar.set_status(status=session.state.value, note=self.state.error_message)

    def on_gams_check_app_reported(self, message: Reported) -> None:
        self.state.update_report(message.diagnostics)
        self.query_one(StatusBar).set_status(errors=len(message.diagnostics))
        self._populate_lines()

    def _load_source(self) -> None:
        try:
            self.state.update_source(Path(self.state.source_path).read_text(errors="replace"))
        except OSError as e:
            logger.error(f"Cannot read {self.state.source_path}: {e}")
            return
        self._populate_lines()

    # --- Rendering ---

    def _render_line(self, idx: int) -> Text:
        line_num = idx + 1
        row = Text()
        if line_num in self.state.error_lines:
            row.append("✖ ", style=f"bold {C_ERROR}")
        else:
            row.append("  ")
        row.append(f"{line_num:>5} │ ", style="dim")
        row.append(self.state.source_lines[idx])
        return row

    def _populate_lines(self) -> None:
        scroll = self.query_one("#source-container", SourceScroll)
        scroll.query(SourceLine).remove()
        self._generation += 1
        self._cursor = min(self._cursor, max(len(self.state.source_lines) - 1, 0))
        error_lines = self.state.error_lines
        widgets = []
        for i in range(len(self.state.source_lines)):
            widget = SourceLine(self._render_line(i), id=f"src-line-{self._generation}-{i}")
            if i + 1 in error_lines:
                widget.add_class("has-error")
            if i == self._cursor:
                widget.add_class("cursor")
            widgets.append(widget)
        if widgets:
            scroll.mount(*widgets)
        self._sync_peek()

    def _move_cursor(self, new: int) -> None:
        if new < 0 or new >= len(self.state.source_lines):
            return
        old, self._cursor = self._cursor, new
        for idx in (old, new):
            widgets = self.query(f"#src-line-{self._generation}-{idx}")
            for widget in widgets:
                widget.set_class(idx == new, "cursor")
                if idx == new:
                    widget.scroll_visible()
        self._sync_peek()

    def _sync_peek(self) -> None:
        line_num = self._cursor + 1
        self.query_one("#diag-peek", DiagnosticPeekPanel).show_for_line(
            line_num,
            self.state.get_source_line(line_num),
            self.state.diagnostics_for_line(line_num),
        )

    def action_cursor_up(self) -> None: self._move_cursor(self._cursor - 1)
    def action_cursor_down(self) -> None: self._move_cursor(self._cursor + 1)

    def action_next_error(self) -> None:
        lines = sorted(self.state.error_lines)
        later = [n for n in lines if n - 1 > self._cursor]
        if later:
            self._move_cursor(later[0] - 1)

    def action_prev_error(self) -> None:
        lines = sorted(self.state.error_lines)
        earlier = [n for n in lines if n - 1 < self._cursor]
        if earlier:
            self._move_cursor(earlier[-1] - 1)


def run_tui(source_file: str, config: ConfigManager | None = None):
    app = GamsCheckApp(source_file, config)
    app.run()
