from .engine import CheckEngine
from .parsing import DiagnosticRecord, MappedDiagnostic, parse_listing, map_diagnostics
from .session import CheckSession, SessionState

__version__ = "0.1.0"

__all__ = [
    "CheckEngine",
    "CheckSession",
    "SessionState",
    "DiagnosticRecord",
    "MappedDiagnostic",
    "parse_listing",
    "map_diagnostics",
]
