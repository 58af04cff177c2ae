import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..parsing.diagnostics import MappedDiagnostic
from ..session import SessionState


@dataclass
class CheckState:
    """
    What the viewer knows about its source file.
    """
    source_path: str = ""
    source_code: str = ""
    source_lines: List[str] = field(default_factory=list)

    # Latest Check
    session_id: int = 0
    session_state: SessionState = SessionState.IDLE
    diagnostics: List[MappedDiagnostic] = field(default_factory=list)
    error_message: str = ""
    last_update: float = 0.0

    @property
    def has_errors(self) -> bool:
        return any(d.severity == "error" for d in self.diagnostics)

    @property
    def error_lines(self) -> Dict[int, List[MappedDiagnostic]]:
        lines: Dict[int, List[MappedDiagnostic]] = {}
        for diag in self.diagnostics:
            lines.setdefault(diag.line_number, []).append(diag)
        return lines

    def diagnostics_for_line(self, line_number: int) -> List[MappedDiagnostic]:
        return [d for d in self.diagnostics if d.line_number == line_number]

    def get_source_line(self, line_number: int) -> Optional[str]:
        if 0 < line_number <= len(self.source_lines):
            return self.source_lines[line_number - 1]
        return None

    def update_source(self, content: str):
        self.source_code = content
        self.source_lines = content.splitlines()

    def update_report(self, diagnostics: List[MappedDiagnostic]):
        self.diagnostics = list(diagnostics)
        self.last_update = time.time()
