"""
Browser Tables - Header Rows

Resolves header rows into a logical grid. A cell spanning several rows is
carried into the rows below it; a cell spanning several columns produces
synthetic columns that can be suffixed, kept plain or dropped.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from playwright.async_api import Locator

from .cells import RawCell, read_rows
from .config import CONFIG
from .schemas import ColspanOptions, HeaderRowOptions, RowKind

logger = logging.getLogger(__name__)

HeaderRow = List[str]


@dataclass(frozen=True)
class _Slot:
    """One logical header column. ``colspan_index`` is 0 for the physical cell"""
    text: str
    colspan_index: int = 0


@dataclass
class _Carry:
    slot: _Slot
    rows_left: int


def replace_empty(text: str, enabled: bool = True) -> str:
    if not text and enabled:
        return CONFIG.EMPTY_CELL_PLACEHOLDER
    return text


def apply_colspan_options(rows: Sequence[Sequence[_Slot]], colspan: ColspanOptions) -> List[HeaderRow]:
    """Render slots to strings: drop, suffix or keep synthetic colspan columns"""
    rendered: List[HeaderRow] = []
    for row in rows:
        values: HeaderRow = []
        for slot in row:
            if slot.colspan_index == 0:
                values.append(slot.text)
            elif not colspan.enabled:
                continue
            elif colspan.suffix:
                values.append(f"{slot.text}{CONFIG.COLSPAN_MARKER}{slot.colspan_index}")
            else:
                values.append(slot.text)
        rendered.append(values)
    return rendered


def apply_duplicate_suffix(row: Sequence[str]) -> HeaderRow:
    """Suffix repeated names within one row: second ``X`` becomes ``X__D1``"""
    counts: Dict[str, int] = {}
    result: HeaderRow = []
    for name in row:
        if name in counts:
            result.append(f"{name}{CONFIG.DUPLICATE_MARKER}{counts[name]}")
            counts[name] += 1
        else:
            counts[name] = 1
            result.append(name)
    return result


class TableHeader:
    """Header row materialization"""

    @classmethod
    async def get_rows(
        cls,
        row_locator: Locator,
        columns_selector: str,
        options: Optional[HeaderRowOptions] = None,
    ) -> List[HeaderRow]:
        """Read header rows from the page and materialize them"""
        options = options or HeaderRowOptions()
        raw_rows = await read_rows(
            row_locator,
            columns_selector,
            RowKind.HEADER,
            options.content_type,
            options.strict_spans,
        )
        return cls.materialize(raw_rows, options)

    @classmethod
    def materialize(cls, raw_rows: Sequence[Sequence[RawCell]], options: Optional[HeaderRowOptions] = None) -> List[HeaderRow]:
        options = options or HeaderRowOptions()
        carry: Dict[int, _Carry] = {}
        slot_rows = [cls._materialize_row(raw_row, carry, options) for raw_row in raw_rows]
        if carry:
            logger.debug(f"Header rowspan extends past the last row at columns {sorted(carry)}")

        rows = apply_colspan_options(slot_rows, options.colspan)
        if options.duplicate_suffix:
            rows = [apply_duplicate_suffix(row) for row in rows]
        return rows

    @classmethod
    def _materialize_row(cls, raw_row: Sequence[RawCell], carry: Dict[int, _Carry], options: HeaderRowOptions) -> List[_Slot]:
        row: List[_Slot] = []
        column = 0

        for cell in raw_row:
            column = cls._flush_carry(row, carry, column)

            text = replace_empty(cell.text, options.empty_cell_replacement)
            for colspan_index in range(cell.col_span):
                slot = _Slot(text, colspan_index)
                row.append(slot)
                if cell.row_span > 1:
                    carry[column] = _Carry(slot, cell.row_span - 1)
                column += 1

        # Trailing columns held by cells from rows above; gaps between them
        # are cells this row simply does not have.
        column = cls._flush_carry(row, carry, column)
        for carried_column in sorted(c for c in carry if c > column):
            while column < carried_column:
                row.append(_Slot(replace_empty("", options.empty_cell_replacement)))
                column += 1
            column = cls._flush_carry(row, carry, column)
        return row

    @staticmethod
    def _flush_carry(row: List[_Slot], carry: Dict[int, _Carry], column: int) -> int:
        while column in carry:
            pending = carry[column]
            row.append(pending.slot)
            pending.rows_left -= 1
            if pending.rows_left == 0:
                del carry[column]
            column += 1
        return column
