"""
Source kind detection: decides from the file extension whether a file is
checked at all. The enabled extensions come from configuration.
"""
from pathlib import Path
from enum import Enum
from typing import Iterable, Optional


class SourceKind(str, Enum):
    GAMS = "gams"
    INCLUDE = "include"
    UNKNOWN = "unknown"


# Extensions that map to each source kind
_EXT_MAP = {
    ".gms": SourceKind.GAMS,
    ".inc": SourceKind.INCLUDE,
}

DEFAULT_EXTENSIONS = (".gms",)


def detect_kind(file_path: str) -> SourceKind:
    """Detect source kind from file extension."""
    ext = Path(file_path).suffix.lower()
    return _EXT_MAP.get(ext, SourceKind.UNKNOWN)


def is_supported(file_path: str, extensions: Optional[Iterable[str]] = None) -> bool:
    """Return True if checking is enabled for this file's extension."""
    enabled = {e.lower() for e in (extensions if extensions is not None else DEFAULT_EXTENSIONS)}
    return Path(file_path).suffix.lower() in enabled


def source_label(kind: SourceKind) -> str:
    """Return a human-readable label for the source kind (used in UI)."""
    if kind == SourceKind.INCLUDE:
        return "GAMS INCLUDE"
    return "GAMS SOURCE"
