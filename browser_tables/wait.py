"""
Browser Tables - Waits

Row-condition checks for tables that fill asynchronously, and the
stability detector that waits until the body grid stops changing.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Protocol, Union

from playwright.async_api import Locator

from .body import BodyRow, TableBody
from .cells import require_selector
from .errors import EmptyResult, PollTimeout, StabilityTimeout, TableError
from .polling import clean_error_message, poll
from .schemas import BodyRowOptions, RowKind, StabilityOptions, WaitForRowsOptions

logger = logging.getLogger(__name__)


class StabilitySource(Protocol):
    """Anything that can produce a comparable grid snapshot"""

    async def snapshot(self) -> List[BodyRow]:
        ...

    def describe(self) -> str:
        ...


async def _content_flags(row: Locator, cell_selector: str) -> List[bool]:
    cells = row.locator(cell_selector)
    count = await cells.count()
    texts = await asyncio.gather(*(cells.nth(index).text_content() for index in range(count)))
    return [bool((text or "").strip()) for text in texts]


class TableWait:
    """Single-shot row checks; callers wrap them in ``poll``"""

    @staticmethod
    def validate_options(options: Union[WaitForRowsOptions, Dict[str, Any], None]) -> WaitForRowsOptions:
        if options is None:
            return WaitForRowsOptions()
        if isinstance(options, WaitForRowsOptions):
            return options
        return WaitForRowsOptions.model_validate(options)

    @classmethod
    async def wait_for_rows(
        cls,
        row_locator: Locator,
        cell_selector: str,
        row_kind: RowKind,
        options: Union[WaitForRowsOptions, Dict[str, Any], None] = None,
    ) -> None:
        """
        Check once that rows matched by ``row_locator`` satisfy ``options``.

        Raises:
            ValueError: blank cell_selector or non-positive counts
            EmptyResult: rows are missing or do not meet the conditions yet
        """
        require_selector(cell_selector, "cell_selector")
        options = cls.validate_options(options)
        kind = RowKind(row_kind).value
        conditions = options.row
        cell_conditions = conditions.cell if conditions else None
        where = f"\nRow locator: {row_locator!r}"

        row_count = await row_locator.count()
        if conditions and conditions.amount:
            if row_count != conditions.amount:
                raise EmptyResult(f"Expected {conditions.amount} {kind} rows, but found {row_count}{where}")
        elif row_count == 0:
            raise EmptyResult(f"No {kind} rows found{where}")

        rows = [row_locator.nth(index) for index in range(row_count)]

        if cell_conditions and cell_conditions.total_count:
            counts = await asyncio.gather(*(row.locator(cell_selector).count() for row in rows))
            if cell_conditions.total_count not in counts:
                raise EmptyResult(
                    f"No {kind} rows found with exactly {cell_conditions.total_count} cells{where}"
                )

        flags = await asyncio.gather(*(_content_flags(row, cell_selector) for row in rows))
        if cell_conditions and cell_conditions.content_count:
            if not any(sum(row_flags) == cell_conditions.content_count for row_flags in flags):
                raise EmptyResult(
                    f"No {kind} rows found with exactly {cell_conditions.content_count} "
                    f"cells containing content{where}"
                )
        elif not any(any(row_flags) for row_flags in flags):
            raise EmptyResult(f"No {kind} cells with content found{where}")


class BodyGridSource:
    """StabilitySource over the materialized body rows of a table"""

    def __init__(self, row_locator: Locator, cell_selector: str, options: Optional[BodyRowOptions] = None):
        self.row_locator = row_locator
        self.cell_selector = cell_selector
        self.options = options

    async def snapshot(self) -> List[BodyRow]:
        return await TableBody.get_rows(self.row_locator, self.cell_selector, self.options)

    def describe(self) -> str:
        return f"Body row locator: {self.row_locator!r}"


async def wait_for_stable(
    source: StabilitySource,
    stability_duration: Optional[int] = None,
    check_interval: Optional[int] = None,
    timeout: Optional[int] = None,
) -> List[BodyRow]:
    """
    Wait until ``source`` yields the same grid for ``stability_duration`` ms.

    Returns:
        The stable snapshot

    Raises:
        pydantic.ValidationError: inconsistent timing, before any polling
        StabilityTimeout: the grid did not stay unchanged long enough in time
    """
    given = {
        "stability_duration": stability_duration,
        "check_interval": check_interval,
        "timeout": timeout,
    }
    options = StabilityOptions(**{key: value for key, value in given.items() if value is not None})

    state: Dict[str, Any] = {"snapshot": None, "stable_since": None}

    async def check() -> None:
        try:
            snapshot = await source.snapshot()
        except Exception as e:
            # Not extractable yet: forget what we saw.
            state["snapshot"] = None
            state["stable_since"] = None
            raise TableError(f"Table not readable yet: {clean_error_message(e)}") from e

        now = time.monotonic()
        if state["snapshot"] is None or snapshot != state["snapshot"]:
            state["snapshot"] = snapshot
            state["stable_since"] = now
            raise TableError("Table content changed")

        unchanged_for = (now - state["stable_since"]) * 1000
        if unchanged_for < options.stability_duration:
            raise TableError(
                f"Table unchanged for {unchanged_for:.0f}ms, need {options.stability_duration}ms"
            )

    description = source.describe()
    try:
        await poll(check, timeout=options.timeout, interval=options.check_interval)
    except PollTimeout as e:
        raise StabilityTimeout(
            f"Table did not stabilize within {options.timeout}ms\n"
            f"Required stability duration: {options.stability_duration}ms\n"
            f"{description}\n"
            f"Last check: {e}",
            options.stability_duration,
            description,
            e.last_error,
        ) from e

    logger.debug(f"Table stable for {options.stability_duration}ms ({description})")
    return state["snapshot"]
