from typing import List

from .diagnostics import DiagnosticRecord, MappedDiagnostic
from .listing import parse_listing
from .mapper import LineIndex, map_diagnostics


def process_listing(listing_text: str, source_text: str, source: str) -> List[MappedDiagnostic]:
    """
    Pipeline: Listing Text -> Records -> Buffer Offsets
    """
    records = parse_listing(listing_text)
    return map_diagnostics(records, source_text, source)
