"""
Browser Tables - Table API

PlaywrightTable ties selectors, row waits, header/body materialization and
polling together for one ``<table>``-like structure on a page.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from playwright.async_api import Locator

from .body import BodyRow, TableBody
from .cells import cast_content
from .config import CONFIG
from .errors import EmptyResult, HeaderNotFound, TableError
from .header import HeaderRow, TableHeader
from .polling import poll
from .schemas import (
    BodyRowOptions,
    HeaderRowOptions,
    HeaderSelectors,
    LoadOptions,
    RowKind,
    RowSelectors,
    WaitForRowsOptions,
)
from .wait import BodyGridSource, TableWait, wait_for_stable

logger = logging.getLogger(__name__)

Conditions = Dict[str, str]


def _conditions_json(conditions: Conditions) -> str:
    return json.dumps(conditions, separators=(",", ":"), ensure_ascii=False)


def _json_header_options(given: Optional[HeaderRowOptions]) -> HeaderRowOptions:
    """Header options for JSON keys: every marker on unless explicitly switched off"""
    merged: Dict[str, Any] = {
        "empty_cell_replacement": True,
        "duplicate_suffix": True,
        "colspan": {"enabled": True, "suffix": True},
    }
    if given is not None:
        overrides = given.model_dump(exclude_unset=True)
        colspan = {**merged["colspan"], **overrides.pop("colspan", {})}
        merged.update(overrides)
        merged["colspan"] = colspan
    return HeaderRowOptions.model_validate(merged)


def _value_at(row: BodyRow, index: int) -> str:
    return row[index] if index < len(row) else ""


class PlaywrightTable:
    """
    Read and wait on an HTML table through Playwright locators.

    Header and body rows are re-read from the page on every call, so a table
    that changes between calls is always reported as it currently is.
    """

    def __init__(
        self,
        table_locator: Locator,
        header: Union[HeaderSelectors, Dict[str, Any], None] = None,
        row: Union[RowSelectors, Dict[str, Any], None] = None,
    ):
        self.table_locator = table_locator
        self.header = header if isinstance(header, HeaderSelectors) else HeaderSelectors.model_validate(header or {})
        self.row = row if isinstance(row, RowSelectors) else RowSelectors.model_validate(row or {})

        self.header_row_locator = table_locator.locator(self.header.row_selector)
        self.body_row_locator = table_locator.locator(self.row.row_selector)

        self.header_rows: List[HeaderRow] = []
        self.body_rows: List[BodyRow] = []

    def __repr__(self) -> str:
        return f"PlaywrightTable({self.table_locator!r})"

    # ============== LOADING ==============

    async def load(self, options: Optional[LoadOptions] = None) -> None:
        """
        Wait until header and body rows have content, then read both.

        Raises:
            PollTimeout: rows never showed up within the timeout
            EmptyResult: rows vanished between the wait and the read
        """
        options = options or LoadOptions()

        async def rows_ready() -> None:
            await asyncio.gather(
                TableWait.wait_for_rows(self.header_row_locator, self.header.column_selector, RowKind.HEADER),
                TableWait.wait_for_rows(self.body_row_locator, self.row.column_selector, RowKind.BODY),
            )

        await poll(rows_ready, timeout=options.timeout or CONFIG.POLL_TIMEOUT, context="load table")

        self.header_rows, self.body_rows = await asyncio.gather(
            TableHeader.get_rows(self.header_row_locator, self.header.column_selector, options.header_row_options),
            TableBody.get_rows(self.body_row_locator, self.row.column_selector, options.body_row_options),
        )

        if not self.header_rows:
            raise EmptyResult(
                f"No header rows found after loading table data.\n"
                f"Header row locator: {self.header_row_locator!r}\n"
                f'Columns selector: "{self.header.column_selector}"'
            )
        if not self.body_rows:
            raise EmptyResult(
                f"No body rows found after loading table data.\n"
                f"Body row locator: {self.body_row_locator!r}\n"
                f'Columns selector: "{self.row.column_selector}"'
            )
        logger.debug(f"Loaded {len(self.header_rows)} header rows and {len(self.body_rows)} body rows from {self!r}")

    def _main_header_row(self) -> HeaderRow:
        if not self.header_rows:
            raise EmptyResult(
                f"No header rows available. Call load() first.\n"
                f"Header row locator: {self.header_row_locator!r}"
            )
        index = self.header.set_main_header_row
        if index is None:
            return self.header_rows[-1]
        if index < 0 or index >= len(self.header_rows):
            raise IndexError(
                f"Main header row index {index} out of bounds. "
                f"Table has {len(self.header_rows)} header rows (valid range: 0-{len(self.header_rows) - 1}).\n"
                f"Header row locator: {self.header_row_locator!r}"
            )
        return self.header_rows[index]

    def _header_index(self, headers: HeaderRow, name: str) -> int:
        try:
            return headers.index(name)
        except ValueError:
            raise HeaderNotFound(
                f'Header "{name}" not found.\n'
                f"Available headers: [{', '.join(headers)}]\n"
                f"Header row locator: {self.header_row_locator!r}"
            ) from None

    def _cell_locator(self, row_index: int, column_index: int) -> Locator:
        return self.body_row_locator.nth(row_index).locator(self.row.column_selector).nth(column_index)

    # ============== ROWS ==============

    async def get_header_rows(
        self,
        timeout: Optional[int] = None,
        header_row_options: Optional[HeaderRowOptions] = None,
    ) -> List[HeaderRow]:
        await self.load(LoadOptions(timeout=timeout, header_row_options=header_row_options))
        return self.header_rows

    async def get_main_header_row(
        self,
        timeout: Optional[int] = None,
        header_row_options: Optional[HeaderRowOptions] = None,
    ) -> HeaderRow:
        """The header row used for lookups: ``set_main_header_row`` or the last one"""
        await self.load(LoadOptions(timeout=timeout, header_row_options=header_row_options))
        return self._main_header_row()

    async def get_body_rows(
        self,
        timeout: Optional[int] = None,
        body_row_options: Optional[BodyRowOptions] = None,
    ) -> List[BodyRow]:
        await self.load(LoadOptions(timeout=timeout, body_row_options=body_row_options))
        return self.body_rows

    # ============== CELL LOCATORS ==============

    def get_body_cell_locator(self, row_number: int, header_position: int) -> Locator:
        """
        Locator of one physical body cell, checked against the last load.

        Raises:
            EmptyResult: nothing has been loaded yet
            IndexError: row or column outside the loaded table
        """
        if not self.body_rows:
            raise EmptyResult("Table has no body rows loaded. Call load() or get_body_rows() first.")
        if row_number < 0 or row_number >= len(self.body_rows):
            raise IndexError(
                f"Row index {row_number} out of bounds. "
                f"Table has {len(self.body_rows)} rows (valid range: 0-{len(self.body_rows) - 1})."
            )
        if not self.header_rows:
            raise EmptyResult("Table has no header rows loaded. Call load() or get_header_rows() first.")
        headers = self._main_header_row()
        if header_position < 0 or header_position >= len(headers):
            raise IndexError(
                f"Column index {header_position} out of bounds. "
                f"Table has {len(headers)} columns (valid range: 0-{len(headers) - 1})."
            )
        return self._cell_locator(row_number, header_position)

    async def get_body_cell_locator_by_row_conditions(
        self,
        conditions: Conditions,
        target_header: str,
        timeout: Optional[int] = None,
    ) -> Locator:
        """Cell under ``target_header`` in the first row whose values match ``conditions``"""
        await self.load(LoadOptions(timeout=timeout))
        headers = self._main_header_row()
        target_index = self._header_index(headers, target_header)
        condition_indexes = {self._header_index(headers, name): value for name, value in conditions.items()}

        for row_index, row in enumerate(self.body_rows):
            if all(_value_at(row, index) == value for index, value in condition_indexes.items()):
                return self._cell_locator(row_index, target_index)

        raise TableError(
            f"No row found matching conditions: {_conditions_json(conditions)}\n"
            f"Total rows searched: {len(self.body_rows)}\n"
            f"Body row locator: {self.body_row_locator!r}"
        )

    async def get_all_body_cell_locators_by_header_name(
        self, header_name: str, timeout: Optional[int] = None
    ) -> List[Locator]:
        await self.load(LoadOptions(timeout=timeout))
        index = self._header_index(self._main_header_row(), header_name)
        return [self._cell_locator(row_index, index) for row_index in range(len(self.body_rows))]

    async def get_all_body_cell_locators_by_header_index(
        self, header_index: int, timeout: Optional[int] = None
    ) -> List[Locator]:
        await self.load(LoadOptions(timeout=timeout))
        headers = self._main_header_row()
        if header_index < 0 or header_index >= len(headers):
            raise IndexError(
                f"Column index {header_index} out of bounds. "
                f"Table has {len(headers)} columns (valid range: 0-{len(headers) - 1})."
            )
        return [self._cell_locator(row_index, header_index) for row_index in range(len(self.body_rows))]

    # ============== RECORDS ==============

    async def get_json(
        self,
        timeout: Optional[int] = None,
        header_row_options: Optional[HeaderRowOptions] = None,
        body_row_options: Optional[BodyRowOptions] = None,
    ) -> List[Dict[str, str]]:
        """
        Body rows as records keyed by the main header row.

        Header markers (empty placeholder, colspan and duplicate suffixes)
        are all on here unless switched off explicitly, so keys are unique.
        """
        await self.load(LoadOptions(
            timeout=timeout,
            header_row_options=_json_header_options(header_row_options),
            body_row_options=body_row_options,
        ))
        headers = self._main_header_row()
        return [
            {header: _value_at(row, index) for index, header in enumerate(headers)}
            for row in self.body_rows
        ]

    async def get_dataframe(
        self,
        timeout: Optional[int] = None,
        header_row_options: Optional[HeaderRowOptions] = None,
        body_row_options: Optional[BodyRowOptions] = None,
        cast: bool = False,
    ) -> pd.DataFrame:
        """Records from get_json as a DataFrame, optionally with cast scalar values"""
        records = await self.get_json(timeout, header_row_options, body_row_options)
        columns = self._main_header_row()
        if cast:
            records = [{key: cast_content(value) for key, value in record.items()} for record in records]
        return pd.DataFrame(records, columns=columns)

    # ============== WAITS ==============

    async def wait_for_header_rows(self, options: Union[WaitForRowsOptions, Dict[str, Any], None] = None) -> None:
        options = TableWait.validate_options(options)
        await poll(
            lambda: TableWait.wait_for_rows(
                self.header_row_locator, self.header.column_selector, RowKind.HEADER, options
            ),
            timeout=options.timeout,
            context="wait for header rows",
        )

    async def wait_for_body_rows(self, options: Union[WaitForRowsOptions, Dict[str, Any], None] = None) -> None:
        options = TableWait.validate_options(options)
        await poll(
            lambda: TableWait.wait_for_rows(
                self.body_row_locator, self.row.column_selector, RowKind.BODY, options
            ),
            timeout=options.timeout,
            context="wait for body rows",
        )

    async def wait_for_stable(
        self,
        stability_duration: Optional[int] = None,
        check_interval: Optional[int] = None,
        timeout: Optional[int] = None,
        body_row_options: Optional[BodyRowOptions] = None,
    ) -> List[BodyRow]:
        """Wait until the body grid stays unchanged; returns the stable rows"""
        source = BodyGridSource(self.body_row_locator, self.row.column_selector, body_row_options)
        self.body_rows = await wait_for_stable(source, stability_duration, check_interval, timeout)
        return self.body_rows

    async def wait_for_empty(self, timeout: Optional[int] = None, interval: Optional[int] = None) -> None:
        async def is_empty() -> None:
            count = await self.body_row_locator.count()
            if count > 0:
                raise TableError(f"Expected table to be empty, but found {count} body rows")

        await poll(is_empty, timeout=timeout, interval=interval)

    async def wait_for_non_empty(self, timeout: Optional[int] = None, interval: Optional[int] = None) -> None:
        async def has_content() -> None:
            count = await self.body_row_locator.count()
            if count == 0:
                raise TableError("Expected table to be non-empty, but found 0 body rows")
            rows = await TableBody.get_rows(self.body_row_locator, self.row.column_selector)
            if not any(value.strip() for row in rows for value in row):
                raise TableError(
                    f"Expected table to have at least one row with content, but all {len(rows)} rows are empty"
                )

        await poll(has_content, timeout=timeout, interval=interval)

    async def wait_for_row_by_conditions(
        self,
        conditions: Conditions,
        min_rows: int = 1,
        timeout: Optional[int] = None,
        interval: Optional[int] = None,
    ) -> List[BodyRow]:
        """
        Wait until at least ``min_rows`` body rows match every condition.

        Returns:
            The matching rows at the moment the condition held
        """
        if isinstance(min_rows, bool) or not isinstance(min_rows, int) or min_rows < 1:
            raise ValueError(f"min_rows must be a positive integer, got: {min_rows}")
        matches: List[BodyRow] = []

        async def enough_matches() -> None:
            headers, rows = await asyncio.gather(
                TableHeader.get_rows(self.header_row_locator, self.header.column_selector),
                TableBody.get_rows(self.body_row_locator, self.row.column_selector),
            )
            self.header_rows, self.body_rows = headers, rows
            header_row = self._main_header_row()
            indexes = {self._header_index(header_row, name): value for name, value in conditions.items()}
            found = [row for row in rows if all(_value_at(row, i) == v for i, v in indexes.items())]
            if len(found) < min_rows:
                raise TableError(
                    f"Expected at least {min_rows} rows matching conditions, but found {len(found)}\n"
                    f"Conditions: {_conditions_json(conditions)}\n"
                    f"Total rows searched: {len(rows)}\n"
                    f"Body row locator: {self.body_row_locator!r}"
                )
            matches[:] = found

        await poll(enough_matches, timeout=timeout, interval=interval, context="wait for row by conditions")
        return matches
