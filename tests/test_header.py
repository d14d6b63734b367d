"""
Unit tests for header row materialization
Tests: Rowspan carry, colspan options, duplicate suffixes, empty cells
"""

import pytest

from browser_tables.cells import RawCell
from browser_tables.header import TableHeader, apply_duplicate_suffix, replace_empty
from browser_tables.schemas import CellContentType, ColspanOptions, HeaderRowOptions
from tests.fakes import rows_locator, th


def cell(text, row_span=1, col_span=1):
    return RawCell(text=text, row_span=row_span, col_span=col_span)


GROUPED = [
    [cell("Name", row_span=2), cell("Contact", col_span=2), cell("Age", row_span=2)],
    [cell("Email"), cell("Phone")],
]


class TestRowspan:
    """Test carrying cells into the rows below"""

    def test_single_row(self):
        rows = TableHeader.materialize([[cell("A"), cell("B")]])

        assert rows == [["A", "B"]]

    def test_grouped_header(self):
        rows = TableHeader.materialize(GROUPED)

        assert rows == [
            ["Name", "Contact", "Contact", "Age"],
            ["Name", "Email", "Phone", "Age"],
        ]

    def test_rowspan_over_three_rows(self):
        raw = [
            [cell("Id", row_span=3), cell("Group", col_span=2)],
            [cell("Sub", col_span=2)],
            [cell("X"), cell("Y")],
        ]

        rows = TableHeader.materialize(raw)

        assert rows == [
            ["Id", "Group", "Group"],
            ["Id", "Sub", "Sub"],
            ["Id", "X", "Y"],
        ]

    def test_block_spanning_rows_and_columns(self):
        raw = [
            [cell("A", row_span=2, col_span=2), cell("B")],
            [cell("C")],
        ]

        options = HeaderRowOptions(colspan=ColspanOptions(enabled=True, suffix=True))
        rows = TableHeader.materialize(raw, options)

        assert rows == [["A", "A__C1", "B"], ["A", "A__C1", "C"]]

    def test_gap_before_trailing_carried_column_is_padded(self):
        raw = [
            [cell("A"), cell("B"), cell("C", row_span=2)],
            [cell("D")],
        ]

        rows = TableHeader.materialize(raw)

        assert rows == [["A", "B", "C"], ["D", "{{Empty}}", "C"]]

    def test_rowspan_past_last_row_is_dropped(self):
        rows = TableHeader.materialize([[cell("A", row_span=5), cell("B")]])

        assert rows == [["A", "B"]]

    def test_materialize_is_repeatable(self):
        """State from one call does not leak into the next"""
        first = TableHeader.materialize(GROUPED)
        second = TableHeader.materialize(GROUPED)

        assert first == second


class TestColspanOptions:
    """Test how synthetic colspan columns are rendered"""

    @pytest.mark.parametrize("enabled,suffix,expected", [
        (True, False, ["Name", "Contact", "Contact", "Age"]),
        (True, True, ["Name", "Contact", "Contact__C1", "Age"]),
        (False, False, ["Name", "Contact", "Age"]),
        (False, True, ["Name", "Contact", "Age"]),
    ])
    def test_first_row(self, enabled, suffix, expected):
        options = HeaderRowOptions(colspan=ColspanOptions(enabled=enabled, suffix=suffix))

        rows = TableHeader.materialize(GROUPED, options)

        assert rows[0] == expected
        assert rows[1] == ["Name", "Email", "Phone", "Age"]

    def test_suffix_counts_from_one(self):
        options = HeaderRowOptions(colspan=ColspanOptions(suffix=True))

        rows = TableHeader.materialize([[cell("Q", col_span=4)]], options)

        assert rows == [["Q", "Q__C1", "Q__C2", "Q__C3"]]

    def test_marker_text_in_real_headers_is_left_alone(self):
        """Only synthetic columns are dropped, never real text that looks like a marker"""
        options = HeaderRowOptions(colspan=ColspanOptions(enabled=False))

        rows = TableHeader.materialize([[cell("Total__C1"), cell("X", col_span=2)]], options)

        assert rows == [["Total__C1", "X"]]


class TestDuplicateSuffix:
    """Test disambiguation of repeated header names"""

    def test_apply_duplicate_suffix(self):
        assert apply_duplicate_suffix(["A", "B", "A", "A", "B"]) == ["A", "B", "A__D1", "A__D2", "B__D1"]

    def test_unique_names_unchanged(self):
        assert apply_duplicate_suffix(["A", "B"]) == ["A", "B"]

    def test_off_by_default(self):
        rows = TableHeader.materialize(GROUPED)

        assert rows[0].count("Contact") == 2

    def test_combined_with_colspan(self):
        options = HeaderRowOptions(duplicate_suffix=True)

        rows = TableHeader.materialize(GROUPED, options)

        assert rows == [
            ["Name", "Contact", "Contact__D1", "Age"],
            ["Name", "Email", "Phone", "Age"],
        ]

    def test_all_markers_on(self):
        options = HeaderRowOptions(
            duplicate_suffix=True,
            colspan=ColspanOptions(enabled=True, suffix=True),
        )
        raw = [[cell(""), cell("Sum", col_span=2), cell("")]]

        rows = TableHeader.materialize(raw, options)

        assert rows == [["{{Empty}}", "Sum", "Sum__C1", "{{Empty}}__D1"]]


class TestEmptyCells:
    """Test empty header cell replacement"""

    def test_replace_empty(self):
        assert replace_empty("") == "{{Empty}}"
        assert replace_empty("", enabled=False) == ""
        assert replace_empty("Name") == "Name"

    def test_disabled_replacement_keeps_blank(self):
        options = HeaderRowOptions(empty_cell_replacement=False)

        rows = TableHeader.materialize([[cell(""), cell("B")]], options)

        assert rows == [["", "B"]]


class TestGetRows:
    """Test reading header rows from locators"""

    @pytest.mark.asyncio
    async def test_grouped_header_from_page(self, grouped_header_table):
        rows = await TableHeader.get_rows(rows_locator(grouped_header_table, "thead>tr"), "th")

        assert rows == [
            ["Name", "Contact", "Contact", "Age"],
            ["Name", "Email", "Phone", "Age"],
        ]

    @pytest.mark.asyncio
    async def test_reads_rendered_text_by_default(self, grouped_header_table):
        grouped_header_table.sections["thead>tr"][1].cells[0] = th("email", inner="EMAIL")

        rendered = await TableHeader.get_rows(rows_locator(grouped_header_table, "thead>tr"), "th")
        raw = await TableHeader.get_rows(
            rows_locator(grouped_header_table, "thead>tr"),
            "th",
            HeaderRowOptions(content_type=CellContentType.TEXT_CONTENT),
        )

        assert rendered[1][1] == "EMAIL"
        assert raw[1][1] == "email"
