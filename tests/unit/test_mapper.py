"""
Unit tests for the position mapper.
Ensures records land on the right buffer offsets and never past a line end.
"""
import pytest
from gamscheck.parsing.mapper import LineIndex, map_diagnostics, map_record, format_message
from gamscheck.parsing.diagnostics import DiagnosticRecord
from gamscheck.errors import MappingOutOfRange

SOURCE = "set i;\nx = y + z;\n\ndisplay x;"


def _record(line, column, code="140", message="Unknown symbol"):
    return DiagnosticRecord(error_code=code, column=column, line_number=line, message=message)


class TestLineIndex:

    def test_line_count(self):
        assert LineIndex(SOURCE).line_count == 4

    def test_trailing_newline_adds_empty_line(self):
        assert LineIndex("a\nb\n").line_count == 3

    def test_empty_text_has_one_line(self):
        index = LineIndex("")
        assert index.line_count == 1
        assert index.line_start(1) == 0
        assert index.line_end(1) == 0

    def test_line_bounds(self):
        index = LineIndex(SOURCE)
        assert index.line_start(2) == 7
        assert index.line_end(2) == 17
        assert SOURCE[index.line_start(2):index.line_end(2)] == "x = y + z;"

    def test_empty_line(self):
        index = LineIndex(SOURCE)
        assert index.line_start(3) == index.line_end(3)

    def test_last_line_without_newline(self):
        index = LineIndex(SOURCE)
        assert index.line_end(4) == len(SOURCE)

    def test_crlf_excluded_from_line(self):
        text = "ab\r\ncd\r\n"
        index = LineIndex(text)
        assert index.line_end(1) == 2
        assert index.line_start(2) == 4

    def test_out_of_range(self):
        index = LineIndex(SOURCE)
        with pytest.raises(MappingOutOfRange):
            index.line_start(5)
        with pytest.raises(MappingOutOfRange):
            index.line_start(0)


class TestOffsets:

    def test_offset_inside_line(self):
        index = LineIndex(SOURCE)
        assert SOURCE[index.offset(2, 4)] == "y"

    def test_offset_clamped_to_line_end(self):
        index = LineIndex(SOURCE)
        assert index.offset(2, 500) == index.line_end(2)

    def test_negative_column_clamped_to_line_start(self):
        index = LineIndex(SOURCE)
        assert index.offset(2, -3) == index.line_start(2)


class TestMapRecord:

    def test_point_diagnostic(self):
        mapped = map_record(_record(2, 4), LineIndex(SOURCE), "model.gms")
        assert mapped.start_offset == 11
        assert mapped.end_offset == mapped.start_offset + 1
        assert mapped.severity == "error"
        assert mapped.source == "model.gms"

    def test_location_fields(self):
        mapped = map_record(_record(2, 500), LineIndex(SOURCE), "model.gms")
        assert mapped.line_number == 2
        assert mapped.column == len("x = y + z;")
        assert mapped.error_code == "140"

    def test_message_includes_code(self):
        assert format_message(_record(1, 0)) == "140: Unknown symbol"

    def test_message_without_text(self):
        assert format_message(_record(1, 0, message="")) == "Error 140"


class TestMapDiagnostics:

    def test_keeps_order(self):
        records = [_record(1, 0, code="1"), _record(2, 4, code="2"), _record(4, 0, code="3")]
        mapped = map_diagnostics(records, SOURCE, "model.gms")
        assert [m.error_code for m in mapped] == ["1", "2", "3"]

    def test_drops_only_out_of_range_record(self):
        records = [_record(2, 4, code="140"), _record(99, 0, code="36")]
        mapped = map_diagnostics(records, SOURCE, "model.gms")
        assert len(mapped) == 1
        assert mapped[0].error_code == "140"

    def test_no_records(self):
        assert map_diagnostics([], SOURCE, "model.gms") == []


class TestProcessListing:

    def test_parse_then_map(self):
        from gamscheck.parsing import process_listing
        listing = "****  $140\n****  LINE 2\n140  Unknown symbol\n"
        [diag] = process_listing(listing, SOURCE, "model.gms")
        assert diag.line_number == 2
        assert diag.message == "140: Unknown symbol"
        assert SOURCE[diag.start_offset] == "y"
