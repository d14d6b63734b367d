"""
Browser Tables - Body Rows

Resolves body rows into a logical grid. Colspan fills sideways with the
same value; rowspan projects the value into the rows below, keyed by
future row index.
"""

import logging
from typing import Dict, List, Optional, Sequence

from playwright.async_api import Locator

from .cells import RawCell, ScalarCell, cast_content, read_rows
from .schemas import BodyRowOptions, RowKind

logger = logging.getLogger(__name__)

BodyRow = List[str]


class TableBody:
    """Body row materialization"""

    @classmethod
    async def get_rows(
        cls,
        row_locator: Locator,
        columns_selector: str,
        options: Optional[BodyRowOptions] = None,
    ) -> List[BodyRow]:
        """Read body rows from the page and materialize them"""
        options = options or BodyRowOptions()
        raw_rows = await read_rows(
            row_locator,
            columns_selector,
            RowKind.BODY,
            options.content_type,
            options.strict_spans,
        )
        return cls.materialize(raw_rows, visual_columns=options.visual_columns)

    @staticmethod
    def materialize(
        raw_rows: Sequence[Sequence[RawCell]],
        visual_columns: bool = False,
    ) -> List[BodyRow]:
        """
        Build the logical grid.

        By default a physical cell lands at its own column (the sum of the
        colspans before it) and a rowspan projects its value into that one
        column of the rows below, where it only fills a column the lower
        row left empty. With ``visual_columns`` the projected values are
        placed first and physical cells take the next free columns, so the
        grid matches what the browser renders.
        """
        # future row index -> column -> value
        spanned_cells: Dict[int, Dict[int, str]] = {}
        rows: List[BodyRow] = []

        for row_index, raw_row in enumerate(raw_rows):
            if visual_columns:
                working = _place_visual(row_index, raw_row, spanned_cells)
            else:
                working = _place_physical(row_index, raw_row, spanned_cells)

            width = max(working) + 1 if working else 0
            rows.append([working.get(index, "") for index in range(width)])

        if spanned_cells:
            logger.debug(f"Body rowspan extends past the last row into rows {sorted(spanned_cells)}")
        return rows

    @staticmethod
    def cast_rows(rows: Sequence[Sequence[str]]) -> List[List[ScalarCell]]:
        """Cast every value with cast_content"""
        return [[cast_content(value) for value in row] for row in rows]


def _place_physical(
    row_index: int,
    raw_row: Sequence[RawCell],
    spanned_cells: Dict[int, Dict[int, str]],
) -> Dict[int, str]:
    working: Dict[int, str] = {}
    column = 0
    for cell in raw_row:
        for span in range(cell.col_span):
            working[column + span] = cell.text
        if cell.row_span > 1:
            for row_offset in range(1, cell.row_span):
                spanned_cells.setdefault(row_index + row_offset, {})[column] = cell.text
        column += cell.col_span

    # Projected values never overwrite a physical cell.
    for held_column, value in spanned_cells.pop(row_index, {}).items():
        working.setdefault(held_column, value)
    return working


def _place_visual(
    row_index: int,
    raw_row: Sequence[RawCell],
    spanned_cells: Dict[int, Dict[int, str]],
) -> Dict[int, str]:
    working: Dict[int, str] = spanned_cells.pop(row_index, {})
    column = 0
    for cell in raw_row:
        while column in working:
            column += 1
        for span in range(cell.col_span):
            working.setdefault(column + span, cell.text)
        if cell.row_span > 1:
            for row_offset in range(1, cell.row_span):
                future = spanned_cells.setdefault(row_index + row_offset, {})
                for span in range(cell.col_span):
                    future[column + span] = cell.text
        column += cell.col_span
    return working
