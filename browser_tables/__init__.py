"""
Browser Tables

Span-aware extraction of HTML tables through Playwright: header and body
rows resolved into logical grids, plus polling waits for tables that fill
or change asynchronously.
"""

from .body import TableBody
from .cells import cast_content, get_cell_content, parse_span_attributes, parse_span_value
from .config import CONFIG
from .errors import (
    CellAccessError,
    EmptyResult,
    HeaderNotFound,
    InvalidSpanAttribute,
    PollTimeout,
    StabilityTimeout,
    TableError,
)
from .header import TableHeader
from .polling import poll
from .schemas import (
    BodyRowOptions,
    CellContentType,
    ColspanOptions,
    HeaderRowOptions,
    HeaderSelectors,
    LoadOptions,
    RowSelectors,
    StabilityOptions,
    WaitForRowsOptions,
)
from .table import PlaywrightTable
from .wait import BodyGridSource, TableWait, wait_for_stable

__all__ = [
    "PlaywrightTable",
    "TableHeader",
    "TableBody",
    "TableWait",
    "BodyGridSource",
    "poll",
    "wait_for_stable",
    "parse_span_value",
    "parse_span_attributes",
    "get_cell_content",
    "cast_content",
    "CONFIG",
    "CellContentType",
    "ColspanOptions",
    "HeaderRowOptions",
    "BodyRowOptions",
    "LoadOptions",
    "HeaderSelectors",
    "RowSelectors",
    "StabilityOptions",
    "WaitForRowsOptions",
    "TableError",
    "InvalidSpanAttribute",
    "CellAccessError",
    "EmptyResult",
    "HeaderNotFound",
    "PollTimeout",
    "StabilityTimeout",
]
