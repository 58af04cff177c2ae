"""
Position mapper: places listing records onto character offsets of a source buffer.
"""
from typing import List

from loguru import logger

from ..errors import MappingOutOfRange
from .diagnostics import DiagnosticRecord, MappedDiagnostic


class LineIndex:
    """
    Line-start table for one buffer. Lines are 1-indexed; a trailing
    newline opens one last, empty line.
    """

    def __init__(self, text: str):
        self.text = text
        self.starts = [0]
        for idx, char in enumerate(text):
            if char == "\n":
                self.starts.append(idx + 1)

    @property
    def line_count(self) -> int:
        return len(self.starts)

    def _check(self, line_number: int):
        if line_number < 1 or line_number > self.line_count:
            raise MappingOutOfRange(line_number, self.line_count)

    def line_start(self, line_number: int) -> int:
        self._check(line_number)
        return self.starts[line_number - 1]

    def line_end(self, line_number: int) -> int:
        """Offset just past the last character of the line, newline excluded."""
        self._check(line_number)
        if line_number == self.line_count:
            end = len(self.text)
        else:
            end = self.starts[line_number] - 1
        if end > self.starts[line_number - 1] and self.text[end - 1] == "\r":
            end -= 1
        return end

    def offset(self, line_number: int, column: int) -> int:
        start = self.line_start(line_number)
        return min(start + max(column, 0), self.line_end(line_number))


def format_message(record: DiagnosticRecord) -> str:
    if record.message:
        return f"{record.error_code}: {record.message}"
    return f"Error {record.error_code}"


def map_record(record: DiagnosticRecord, index: LineIndex, source: str) -> MappedDiagnostic:
    start = index.offset(record.line_number, record.column)
    return MappedDiagnostic(
        source=source,
        start_offset=start,
        end_offset=start + 1,
        severity="error",
        message=format_message(record),
        line_number=record.line_number,
        column=start - index.line_start(record.line_number),
        error_code=record.error_code,
    )


def map_diagnostics(records: List[DiagnosticRecord], text: str, source: str) -> List[MappedDiagnostic]:
    """
    Maps every record onto `text`. Records pointing past the end of the
    buffer are dropped one by one; the rest keep their order.
    """
    index = LineIndex(text)
    mapped = []
    for record in records:
        try:
            mapped.append(map_record(record, index, source))
        except MappingOutOfRange as e:
            logger.warning(f"Dropping diagnostic {record.error_code} for {source}: {e}")
    return mapped
