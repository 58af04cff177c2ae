"""
Listing parser: turns the text of a compiler listing (.lst) into DiagnosticRecords.

Errors show up in the listing as a block of marker lines under the offending
source line:

    ****                     $140,172
    ****  LINE     12
    140  COMPILATION ERROR
    172  UNDEFINED SYMBOL

The first marker line places every error code with a '$'. The block then
carries one shared LINE directive and a message per code, each message
possibly spread over several lines.
"""
import re
from typing import Dict, List, Optional, Tuple

from loguru import logger

from ..errors import ParseMalformed
from .diagnostics import DiagnosticRecord

# --- LISTING PATTERNS ---
RE_MARKER_PREFIX = re.compile(r"^\*{4}(?!\*)")
RE_CODE_MARKER = re.compile(r"\$(\d+(?:,\d+)*)")
RE_LINE_DIRECTIVE = re.compile(r"^\s*LINE\s+(\d+)")
RE_CODE_MESSAGE = re.compile(r"^(\d+)(?:\s+(.*))?$")
# Marker bodies pad the code after the prefix: "****  8 ')' expected".
RE_MARKER_CODE_MESSAGE = re.compile(r"^\s*(\d+)(?:\s+(.*))?$")
# Source lines echoed with a right-aligned line number: "   4  display x;".
RE_SOURCE_ECHO = re.compile(r"^\s+\d+\s{2,}\S")
RE_LEADING_CODE = re.compile(r"^\d+\s*")

PREFIX_WIDTH = 4
# Distance between a '$' in the raw marker line and the column it points at.
COLUMN_OFFSET = 2


class ErrorBlock:
    """
    Per-block parser state. Owns the message fragments of its codes and is
    thrown away as soon as its records are emitted.
    """

    def __init__(self, markers: List[Tuple[str, int]]):
        self.markers = markers
        self.line_number: Optional[int] = None
        self.fragments: Dict[str, List[str]] = {code: [] for code, _ in markers}
        self.current: Optional[str] = None

    def set_line(self, line_number: int):
        if self.line_number is None:
            self.line_number = line_number

    def switch_code(self, code: str, text: str):
        self.current = code
        if text and code in self.fragments:
            self.fragments[code].append(text)

    def add_continuation(self, text: str):
        if not text:
            return
        if self.current is None:
            # Context before the first explicit code belongs to every code.
            for fragments in self.fragments.values():
                fragments.append(text)
        elif self.current in self.fragments:
            self.fragments[self.current].append(text)

    def records(self) -> List[DiagnosticRecord]:
        if self.line_number is None:
            raise ParseMalformed(f"error block {self.codes()} has no LINE directive")
        if self.line_number < 1:
            raise ParseMalformed(f"error block {self.codes()} has line {self.line_number}")

        return [
            DiagnosticRecord(
                error_code=code,
                column=column,
                line_number=self.line_number,
                message=join_message(self.fragments[code]),
            )
            for code, column in self.markers
        ]

    def codes(self) -> List[str]:
        return [code for code, _ in self.markers]


def join_message(fragments: List[str]) -> str:
    message = " ".join(fragments)
    return RE_LEADING_CODE.sub("", message, count=1)


def find_markers(line: str) -> List[Tuple[str, int]]:
    """
    Returns (code, column) for every '$' code marker of a raw marker line,
    left to right. The column is the offset of the '$' in the raw line minus 2.

    '$140,172' yields two codes at the same column. Such records tie on
    (line_number, column) and keep their listing order through the stable sort,
    so columns are only distinct per '$', not per code.
    """
    markers = []
    for match in RE_CODE_MARKER.finditer(line):
        column = match.start() - COLUMN_OFFSET
        for code in match.group(1).split(","):
            markers.append((code, column))
    return markers


def _close_block(block: Optional[ErrorBlock], records: List[DiagnosticRecord]):
    if block is None:
        return
    try:
        records.extend(block.records())
    except ParseMalformed as e:
        logger.debug(f"Skipping malformed block: {e}")


def parse_listing(text: str) -> List[DiagnosticRecord]:
    """
    Parses the full text of a listing file.
    Returns one record per error code occurrence, sorted by (line_number, column).
    """
    records: List[DiagnosticRecord] = []
    block: Optional[ErrorBlock] = None

    for raw in text.splitlines():
        prefix = RE_MARKER_PREFIX.match(raw)
        body = raw[PREFIX_WIDTH:] if prefix else raw

        if prefix:
            markers = find_markers(raw)
            if markers:
                _close_block(block, records)
                block = ErrorBlock(markers)
                continue

        if block is None:
            continue

        line_match = RE_LINE_DIRECTIVE.match(body)
        if line_match:
            block.set_line(int(line_match.group(1)))
            continue

        code_pattern = RE_MARKER_CODE_MESSAGE if prefix else RE_CODE_MESSAGE
        code_match = code_pattern.match(body)
        if code_match:
            block.switch_code(code_match.group(1), (code_match.group(2) or "").strip())
            continue

        if not body.strip():
            continue

        if not prefix and RE_SOURCE_ECHO.match(body):
            # Echo of the next source line: the error block is over.
            _close_block(block, records)
            block = None
            continue

        if prefix or body[0].isspace():
            block.add_continuation(body.strip())
        else:
            # Plain listing text: the error block is over.
            _close_block(block, records)
            block = None

    _close_block(block, records)

    records.sort(key=lambda r: (r.line_number, r.column))
    return records
