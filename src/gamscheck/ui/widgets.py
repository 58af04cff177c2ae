"""
Custom Widgets
==============
Exposes: SourceLine, StatusBar

The viewer shows the checked source read-only. The user edits the file in
their own editor; Watchdog detects saves and the diagnostics update live.
"""

from __future__ import annotations

from textual.widgets import Static


class SourceLine(Static):
    """One line of the source view."""


class StatusBar(Static):
    """
    Bottom bar: current file, check status, error count.
    ID: #status-bar
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(id="status-bar", **kwargs)
        self._file: str = ""
        self._status: str = "idle"
        self._errors: int = 0
        self._note: str = ""

    def set_status(
        self,
        *,
        file: str | None = None,
        status: str | None = None,
        errors: int | None = None,
        note: str | None = None,
    ) -> None:
        if file is not None:
            self._file = file
        if status is not None:
            self._status = status
        if errors is not None:
            self._errors = errors
        if note is not None:
            self._note = note
        self._render_bar()

    def _render_bar(self) -> None:
        parts = []
        if self._file:
            parts.append(f"📄 {self._file}")
        parts.append(f"● {self._status}")
        if self._errors:
            parts.append(f"❌ {self._errors} error(s)")
        if self._note:
            parts.append(self._note)
        self.update("  │  ".join(parts))
