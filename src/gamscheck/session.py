"""
Check session: the state of one check cycle, from saving the source to
delivering its diagnostics.

    IDLE -> SPAWNING -> RUNNING -> PARSING -> REPORTED
                  \\          \\         \\
                   +----------+---------+--> REPORTED_EMPTY

Sessions overtaken by a newer check of the same source end in SUPERSEDED
and never report.
"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from .errors import InvalidTransition
from .parsing.diagnostics import MappedDiagnostic

ReportCallback = Callable[[List[MappedDiagnostic]], None]


class SessionState(str, Enum):
    IDLE = "idle"
    SPAWNING = "spawning"
    RUNNING = "running"
    PARSING = "parsing"
    REPORTED = "reported"
    REPORTED_EMPTY = "reported-empty"
    SUPERSEDED = "superseded"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.REPORTED, SessionState.REPORTED_EMPTY, SessionState.SUPERSEDED)


_TRANSITIONS = {
    SessionState.IDLE: {SessionState.SPAWNING, SessionState.REPORTED_EMPTY, SessionState.SUPERSEDED},
    SessionState.SPAWNING: {SessionState.RUNNING, SessionState.REPORTED_EMPTY, SessionState.SUPERSEDED},
    SessionState.RUNNING: {SessionState.PARSING, SessionState.REPORTED_EMPTY, SessionState.SUPERSEDED},
    SessionState.PARSING: {SessionState.REPORTED, SessionState.REPORTED_EMPTY},
}


@dataclass
class CheckSession:
    session_id: int
    source_path: Path
    listing_path: Path
    report: ReportCallback
    source_text: Optional[str] = None
    state: SessionState = SessionState.IDLE
    process: Optional[asyncio.subprocess.Process] = None
    error: Optional[Exception] = None
    diagnostics: List[MappedDiagnostic] = field(default_factory=list)
    cancelled: bool = False
    _delivered: bool = field(default=False, repr=False)

    @property
    def key(self) -> str:
        return str(self.source_path)

    @property
    def delivered(self) -> bool:
        return self._delivered

    @property
    def failed(self) -> bool:
        return self.error is not None

    def advance(self, new_state: SessionState):
        if new_state not in _TRANSITIONS.get(self.state, set()):
            raise InvalidTransition(f"session {self.session_id}: {self.state.value} -> {new_state.value}")
        logger.debug(f"Session {self.session_id} ({self.source_path.name}): {self.state.value} -> {new_state.value}")
        self.state = new_state

    def deliver(self, diagnostics: List[MappedDiagnostic]) -> bool:
        """
        Hands the diagnostics to the report callback. Only the first call
        reaches the callback; an empty list is the explicit "no errors" signal.
        """
        if self._delivered:
            logger.warning(f"Session {self.session_id} already reported; dropping second report")
            return False
        self._delivered = True
        self.diagnostics = list(diagnostics)
        try:
            self.report(self.diagnostics)
        except Exception as e:
            logger.exception(f"Report callback of session {self.session_id} failed: {e}")
        return True

    def cancel(self):
        """Stops the compiler process of this session if it is still running."""
        self.cancelled = True
        if self.process is not None and self.process.returncode is None:
            try:
                self.process.terminate()
            except ProcessLookupError:
                pass
