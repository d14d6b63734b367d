"""
Browser Tables - Cell Reading

Reads one cell locator: trimmed text in rendered or raw mode, and its
rowspan/colspan attributes. Also casts body cell text to scalars for
consumers that want typed values.
"""

import asyncio
import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from playwright.async_api import Error as PError
from playwright.async_api import Locator

from .errors import CellAccessError, InvalidSpanAttribute, TableError
from .schemas import CellContentType, RowKind

logger = logging.getLogger(__name__)

ScalarCell = Union[str, int, float, bool]

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True)
class RawCell:
    """One physical cell: trimmed text plus its declared spans"""
    text: str
    row_span: int = 1
    col_span: int = 1


# ============== SPAN ATTRIBUTES ==============

def parse_span_value(attribute: str, raw: Optional[str], strict: bool = True) -> int:
    """Parse a rowspan/colspan attribute value.

    Absent or blank values mean 1. In strict mode anything that is not an
    integer >= 1 raises InvalidSpanAttribute; in lenient mode it becomes 1.
    """
    if raw is None or raw.strip() == "":
        return 1
    try:
        value = int(raw.strip())
    except ValueError:
        value = 0
    if value >= 1:
        return value
    if strict:
        raise InvalidSpanAttribute(attribute, raw)
    logger.debug(f"Coercing invalid {attribute}={raw!r} to 1")
    return 1


async def parse_span_attributes(cell: Locator, strict: bool = True) -> Tuple[int, int]:
    """Read and validate (rowspan, colspan) of a cell"""
    try:
        rowspan_raw, colspan_raw = await asyncio.gather(
            cell.get_attribute("rowspan"),
            cell.get_attribute("colspan"),
        )
    except PError as e:
        raise CellAccessError(
            f"Failed to read span attributes\n"
            f"Locator: {cell!r}\n"
            f"Reason: {e.message}"
        ) from e

    try:
        return (
            parse_span_value("rowspan", rowspan_raw, strict),
            parse_span_value("colspan", colspan_raw, strict),
        )
    except InvalidSpanAttribute as e:
        raise InvalidSpanAttribute(
            e.attribute,
            e.raw_value,
            f"Failed to parse span attributes: {e}\nLocator: {cell!r}",
        ) from e


# ============== CONTENT ==============

async def get_cell_content(cell: Locator, content_type: CellContentType = CellContentType.INNER_TEXT) -> str:
    """Trimmed text of a cell, empty string when it has none"""
    content_type = CellContentType(content_type)
    try:
        if await cell.count() == 0:
            raise CellAccessError(
                f"Failed to get cell content: element not found\n"
                f"Locator: {cell!r}\n"
                f"Content type: {content_type.value}"
            )
        if content_type == CellContentType.INNER_TEXT:
            content = await cell.inner_text()
        else:
            content = await cell.text_content()
    except PError as e:
        raise CellAccessError(
            f"Failed to get cell content\n"
            f"Locator: {cell!r}\n"
            f"Content type: {content_type.value}\n"
            f"Reason: {e.message}"
        ) from e
    return (content or "").strip()


async def read_cell(
    cell: Locator,
    content_type: CellContentType = CellContentType.INNER_TEXT,
    strict: bool = True,
) -> RawCell:
    """Read text and spans of one cell concurrently"""
    text, (row_span, col_span) = await asyncio.gather(
        get_cell_content(cell, content_type),
        parse_span_attributes(cell, strict),
    )
    return RawCell(text=text, row_span=row_span, col_span=col_span)


def require_selector(selector: str, name: str) -> str:
    if not selector or not selector.strip():
        raise ValueError(f"{name} cannot be empty")
    return selector


async def read_row_cells(
    row: Locator,
    columns_selector: str,
    content_type: CellContentType,
    strict: bool = True,
) -> List[RawCell]:
    """Read every cell of one row; reads are concurrent, order is physical order"""
    cells = row.locator(columns_selector)
    count = await cells.count()
    return list(await asyncio.gather(
        *(read_cell(cells.nth(index), content_type, strict) for index in range(count))
    ))


async def read_rows(
    row_locator: Locator,
    columns_selector: str,
    row_kind: RowKind,
    content_type: CellContentType,
    strict: bool = True,
) -> List[List[RawCell]]:
    """Read all rows matched by ``row_locator``, one row at a time.

    A failure in any row aborts the read and is re-raised with the row
    index and selectors attached.
    """
    require_selector(columns_selector, "columns_selector")
    kind = RowKind(row_kind).value
    row_count = await row_locator.count()
    logger.debug(f"Reading {row_count} {kind} rows from {row_locator!r}")

    raw_rows: List[List[RawCell]] = []
    for index in range(row_count):
        try:
            raw_rows.append(
                await read_row_cells(row_locator.nth(index), columns_selector, content_type, strict)
            )
        except TableError as e:
            raise e.with_message(
                f"Failed to process {kind} row at index {index}: {e}\n"
                f"{kind.capitalize()} row locator: {row_locator!r}\n"
                f'Columns selector: "{columns_selector}"'
            ) from e
    return raw_rows


# ============== CASTING ==============

def _parse_number(value: str) -> Optional[Union[int, float]]:
    # "1_000" is text in a table, even though Python literals allow it.
    if "_" in value:
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        # 0x1F, 0o17, 0b101
        return int(value, 0)
    except ValueError:
        pass
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def cast_content(value: str) -> ScalarCell:
    """Cast cell text to bool / number where it unambiguously is one.

    Numbers are decimal integers, floats in any notation Python's ``float``
    reads (``1e3``, ``.5``, ``+2.``) and ``0x`` / ``0o`` / ``0b`` prefixed
    integers. Text with underscores, and NaN or infinity, stays a string.
    Date-like text (``2024-01-05``) stays a string, and empty text stays
    empty rather than becoming 0 or False.
    """
    trimmed = value.strip()
    if trimmed == "":
        return ""

    lowered = trimmed.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    if DATE_PATTERN.search(trimmed):
        return trimmed

    number = _parse_number(trimmed)
    return trimmed if number is None else number
