import asyncio
import itertools
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from .compiler.driver import GamsDriver
from .errors import ProcessSpawnError, UnsupportedSource
from .parsing import MappedDiagnostic, process_listing
from .session import CheckSession, ReportCallback, SessionState
from .utils.config import ConfigManager, DEFAULT_CONFIG
from .utils.lang import is_supported


class CheckEngine:
    """
    Session factory and orchestrator of check cycles:
    save -> spawn -> wait -> parse -> map -> report -> cleanup.

    Every check of a source gets a larger session id than the one before.
    Only the newest session of a source may report; older ones still running
    are stopped and end as SUPERSEDED.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None, driver: Optional[GamsDriver] = None):
        self.config = config_manager if config_manager else ConfigManager()
        self.driver = driver if driver else GamsDriver(self.config)
        self._ids = itertools.count(1)
        self._latest: Dict[str, int] = {}
        self._active: Dict[str, CheckSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def extensions(self) -> List[str]:
        return list(self.config.get("extensions", DEFAULT_CONFIG["extensions"]))

    def is_enabled(self, source_path) -> bool:
        return is_supported(str(source_path), self.extensions)

    def new_session(self, source_path, report: ReportCallback, text: Optional[str] = None) -> CheckSession:
        path = Path(source_path).resolve()
        if not self.is_enabled(path):
            raise UnsupportedSource(f"Checking is not enabled for '{path.name}' (enabled: {', '.join(self.extensions)})")

        session = CheckSession(
            session_id=next(self._ids),
            source_path=path,
            listing_path=self.driver.listing_path(path),
            report=report,
            source_text=text,
        )
        self._latest[session.key] = session.session_id
        return session

    def is_current(self, session: CheckSession) -> bool:
        return self._latest.get(session.key) == session.session_id

    async def check(self, source_path, report: ReportCallback, text: Optional[str] = None) -> CheckSession:
        """
        Runs one check cycle. `report` is called exactly once with the
        diagnostics (an empty list means none), unless a newer check of the
        same source overtakes this one.
        """
        session = self.new_session(source_path, report, text)
        await self.run_session(session)
        return session

    async def run_session(self, session: CheckSession):
        prior = self._active.get(session.key)
        self._active[session.key] = session
        if prior is not None and prior is not session:
            logger.debug(f"Session {session.session_id} supersedes session {prior.session_id}")
            prior.cancel()

        # One session per source owns the listing file at a time.
        lock = self._locks.setdefault(session.key, asyncio.Lock())
        try:
            async with lock:
                if not self.is_current(session):
                    session.advance(SessionState.SUPERSEDED)
                    return
                if not self._persist(session):
                    return
                session.advance(SessionState.SPAWNING)
                try:
                    await self.driver.run(session, self._on_process_exit)
                except ProcessSpawnError as e:
                    logger.error(f"Check of {session.source_path.name} failed: {e}")
                    session.error = e
                    if not self.is_current(session):
                        session.advance(SessionState.SUPERSEDED)
                        return
                    self._report_empty(session)
        except asyncio.CancelledError:
            session.cancel()
            raise
        finally:
            if self._active.get(session.key) is session:
                del self._active[session.key]

    def _persist(self, session: CheckSession) -> bool:
        """Write-before-check: the compiler reads the file, not the buffer."""
        if session.source_text is None:
            return True
        try:
            session.source_path.write_text(session.source_text)
        except OSError as e:
            logger.error(f"Cannot save {session.source_path} before checking: {e}")
            session.error = e
            self._report_empty(session)
            return False
        return True

    def _report_empty(self, session: CheckSession):
        session.advance(SessionState.REPORTED_EMPTY)
        session.deliver([])

    def _on_process_exit(self, session: CheckSession, status: int):
        if not self.is_current(session):
            session.advance(SessionState.SUPERSEDED)
            self._cleanup(session)
            return

        if not session.listing_path.exists():
            logger.info(f"No listing for {session.source_path.name} (exit status {status})")
            self._report_empty(session)
            return

        session.advance(SessionState.PARSING)
        try:
            diagnostics = self._parse_and_map(session)
        except Exception as e:
            logger.exception(f"Could not process listing {session.listing_path}: {e}")
            session.error = e
            self._report_empty(session)
        else:
            session.advance(SessionState.REPORTED)
            session.deliver(diagnostics)
        finally:
            self._cleanup(session)

    def _parse_and_map(self, session: CheckSession) -> List[MappedDiagnostic]:
        listing_text = session.listing_path.read_text(errors="replace")
        if session.source_text is not None:
            source_text = session.source_text
        else:
            source_text = session.source_path.read_text(errors="replace")
        diagnostics = process_listing(listing_text, source_text, str(session.source_path))
        logger.info(f"{session.source_path.name}: {len(diagnostics)} diagnostic(s)")
        return diagnostics

    @staticmethod
    def _cleanup(session: CheckSession):
        try:
            session.listing_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete listing {session.listing_path}: {e}")

    def cancel(self, source_path):
        session = self._active.get(str(Path(source_path).resolve()))
        if session is not None:
            session.cancel()

    def shutdown(self):
        for session in list(self._active.values()):
            session.cancel()

    def check_file(self, source_path, text: Optional[str] = None) -> List[MappedDiagnostic]:
        """Blocking single check, for scripts and the command line."""
        reports: List[MappedDiagnostic] = []
        asyncio.run(self.check(source_path, reports.extend, text))
        return reports
