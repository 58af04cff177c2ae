"""
Diagnostic Peek Widget
======================
A small panel that shows the source line under the cursor with a caret
under every error column, followed by the messages for that line.
"""

from __future__ import annotations

from typing import List

from rich.text import Text
from textual.widgets import Static

from ..parsing.diagnostics import MappedDiagnostic


class DiagnosticPeekPanel(Static):
    """Bottom panel listing the diagnostics of the selected source line."""

    DEFAULT_CSS = """
    DiagnosticPeekPanel {
        height: 7;
        dock: bottom;
        background: #252526;
        color: #d4d4d4;
        border-top: solid #3c3c3c;
        padding: 0 1;
    }
    """

    def show_for_line(self, line_number: int, code: str | None, diagnostics: List[MappedDiagnostic]) -> None:
        if not diagnostics:
            self._render_empty(line_number)
            return

        context = Text()
        if code is not None:
            context.append(f"{line_number:>5} │ ", style="bold yellow")
            context.append(code, style="bold white")
            context.append("\n")

            columns = sorted({d.column for d in diagnostics})
            caret_row = [" "] * (max(columns) + 1)
            for col in columns:
                caret_row[col] = "^"
            context.append("      │ ", style="dim")
            context.append("".join(caret_row), style="bold red")
            context.append("\n")

        for diag in diagnostics:
            context.append(f"  col {diag.column + 1:>3}  ", style="dim")
            context.append(diag.message, style="red")
            context.append("\n")

        self.update(context)

    def _render_empty(self, line_number: int) -> None:
        t = Text()
        t.append("GAMS ", style="bold cyan")
        t.append("│ ", style="dim")
        t.append(f"no diagnostics on line {line_number}", style="dim italic")
        self.update(t)
