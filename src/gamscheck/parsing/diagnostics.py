from dataclasses import dataclass


@dataclass(frozen=True)
class DiagnosticRecord:
    """One error code occurrence read from a listing file."""
    error_code: str
    column: int
    line_number: int
    message: str


@dataclass(frozen=True)
class MappedDiagnostic:
    """
    A DiagnosticRecord placed onto a source buffer.
    Always a point diagnostic: end_offset == start_offset + 1.
    """
    source: str
    start_offset: int
    end_offset: int
    severity: str  # always 'error' for listing diagnostics
    message: str
    line_number: int = 0
    column: int = 0
    error_code: str = ""
