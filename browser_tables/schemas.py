"""
Browser Tables - Pydantic Schemas

Options objects for header/body materialization, row waits, stability
detection and the extraction service.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .config import CONFIG


class CellContentType(str, Enum):
    """Which text of a cell is read.

    - ``INNER_TEXT``: rendered text as the user sees it (hidden elements
      excluded, CSS text-transform applied).
    - ``TEXT_CONTENT``: raw text content of the element.
    """
    INNER_TEXT = "innerText"
    TEXT_CONTENT = "textContent"


class RowKind(str, Enum):
    HEADER = "header"
    BODY = "body"


def _require_positive_int(value: Any, name: str) -> Any:
    if value is None:
        return value
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got: {value}")
    return value


# ============== SELECTORS ==============

class HeaderSelectors(BaseModel):
    """Where header rows and cells live, relative to the table locator"""
    row_selector: str = CONFIG.HEADER_ROW_SELECTOR
    column_selector: str = CONFIG.HEADER_CELL_SELECTOR
    set_main_header_row: Optional[int] = Field(
        default=None,
        description="Index of the header row used for lookups and JSON keys; last row when unset",
    )

    @field_validator("row_selector", "column_selector")
    @classmethod
    def _not_blank(cls, value, info):
        if not value.strip():
            raise ValueError(f"header.{info.field_name} cannot be empty")
        return value


class RowSelectors(BaseModel):
    """Where body rows and cells live, relative to the table locator"""
    row_selector: str = CONFIG.BODY_ROW_SELECTOR
    column_selector: str = CONFIG.BODY_CELL_SELECTOR

    @field_validator("row_selector", "column_selector")
    @classmethod
    def _not_blank(cls, value, info):
        if not value.strip():
            raise ValueError(f"row.{info.field_name} cannot be empty")
        return value


# ============== MATERIALIZATION OPTIONS ==============

class ColspanOptions(BaseModel):
    """How synthetic colspan columns show up in header rows"""
    enabled: bool = True
    suffix: bool = False


class HeaderRowOptions(BaseModel):
    """Options for header row materialization"""
    content_type: CellContentType = CellContentType.INNER_TEXT
    empty_cell_replacement: bool = True
    duplicate_suffix: bool = False
    colspan: ColspanOptions = Field(default_factory=ColspanOptions)
    strict_spans: bool = Field(
        default=True,
        description="Reject malformed span attributes instead of coercing them to 1",
    )


class BodyRowOptions(BaseModel):
    """Options for body row materialization"""
    content_type: CellContentType = CellContentType.TEXT_CONTENT
    strict_spans: bool = True
    visual_columns: bool = Field(
        default=False,
        description="Place physical cells after columns held by rowspans from above, "
                    "as a browser renders them, instead of at their physical index",
    )


class LoadOptions(BaseModel):
    """Options for loading headers and body rows in one go"""
    timeout: Optional[int] = None
    header_row_options: Optional[HeaderRowOptions] = None
    body_row_options: Optional[BodyRowOptions] = None


# ============== WAIT OPTIONS ==============

class CellCountOptions(BaseModel):
    """Per-row cell conditions"""
    total_count: Optional[int] = None
    content_count: Optional[int] = None

    @field_validator("total_count", "content_count", mode="before")
    @classmethod
    def _positive(cls, value, info):
        return _require_positive_int(value, f"row.cell.{info.field_name}")


class RowConditions(BaseModel):
    """Row amount and per-row cell conditions"""
    amount: Optional[int] = None
    cell: Optional[CellCountOptions] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _positive_amount(cls, value):
        return _require_positive_int(value, "row.amount")


class WaitForRowsOptions(BaseModel):
    """Options for waiting until table rows appear or meet conditions"""
    timeout: Optional[int] = None
    row: Optional[RowConditions] = None


class StabilityOptions(BaseModel):
    """Timing of the stability detector, all values in milliseconds.

    Validated up front so a bad combination fails before any polling.
    """
    stability_duration: int = CONFIG.STABILITY_DURATION
    check_interval: int = CONFIG.STABILITY_CHECK_INTERVAL
    timeout: int = CONFIG.STABILITY_TIMEOUT

    @model_validator(mode="after")
    def _check_timing(self) -> "StabilityOptions":
        if self.check_interval <= 0:
            raise ValueError(f"check_interval must be positive, got: {self.check_interval}")
        if self.stability_duration <= 0:
            raise ValueError(f"stability_duration must be positive, got: {self.stability_duration}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got: {self.timeout}")
        if self.check_interval > self.stability_duration / 2:
            raise ValueError(
                f"check_interval ({self.check_interval}ms) must be at most half of "
                f"stability_duration ({self.stability_duration}ms)"
            )
        if self.stability_duration >= self.timeout:
            raise ValueError(
                f"stability_duration ({self.stability_duration}ms) must be less than timeout ({self.timeout}ms)"
            )
        if self.timeout < self.check_interval + self.stability_duration:
            raise ValueError(
                f"timeout ({self.timeout}ms) must be at least check_interval + stability_duration "
                f"({self.check_interval + self.stability_duration}ms)"
            )
        return self


# ============== SERVICE ==============

class TableExtractionRequest(BaseModel):
    """Extraction request for the HTTP service"""
    url: str
    table_selector: str = "table"
    header_row_selector: str = CONFIG.HEADER_ROW_SELECTOR
    header_cell_selector: str = CONFIG.HEADER_CELL_SELECTOR
    body_row_selector: str = CONFIG.BODY_ROW_SELECTOR
    body_cell_selector: str = CONFIG.BODY_CELL_SELECTOR
    main_header_row: Optional[int] = None
    header_row_options: Optional[HeaderRowOptions] = None
    body_row_options: Optional[BodyRowOptions] = None
    timeout: Optional[int] = None
    stability: Optional[StabilityOptions] = None


class TableExtractionResult(BaseModel):
    """Extraction result"""
    success: bool
    headers: List[List[str]] = Field(default_factory=list)
    rows: List[List[str]] = Field(default_factory=list)
    records: List[Dict[str, str]] = Field(default_factory=list)
    error: Optional[str] = None
