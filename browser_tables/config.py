"""
Browser Tables - Configuration

Centralized defaults for table extraction. Every value can be overridden
through a ``BROWSER_TABLES_*`` environment variable (``.env`` is honoured).
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(f"BROWSER_TABLES_{name}")
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_str(name: str, default: str) -> str:
    return os.getenv(f"BROWSER_TABLES_{name}", default)


class TableConfig:
    """Centralized configuration for table extraction"""

    # Timeouts (in milliseconds)
    POLL_TIMEOUT: int = _env_int("POLL_TIMEOUT", 30000)  # 30 seconds
    POLL_INTERVAL: int = _env_int("POLL_INTERVAL", 100)
    STABILITY_DURATION: int = _env_int("STABILITY_DURATION", 1000)
    STABILITY_CHECK_INTERVAL: int = _env_int("STABILITY_CHECK_INTERVAL", 100)
    STABILITY_TIMEOUT: int = _env_int("STABILITY_TIMEOUT", 10000)
    NAVIGATION_TIMEOUT: int = _env_int("NAVIGATION_TIMEOUT", 60000)

    # Default selectors
    HEADER_ROW_SELECTOR: str = _env_str("HEADER_ROW_SELECTOR", "thead>tr")
    HEADER_CELL_SELECTOR: str = _env_str("HEADER_CELL_SELECTOR", "th")
    BODY_ROW_SELECTOR: str = _env_str("BODY_ROW_SELECTOR", "tbody>tr")
    BODY_CELL_SELECTOR: str = _env_str("BODY_CELL_SELECTOR", "td")

    # Header markers
    EMPTY_CELL_PLACEHOLDER: str = "{{Empty}}"
    COLSPAN_MARKER: str = "__C"
    DUPLICATE_MARKER: str = "__D"

    # Service
    SERVICE_HOST: str = _env_str("HOST", "0.0.0.0")
    SERVICE_PORT: int = _env_int("PORT", 8095)


# Global config instance
CONFIG = TableConfig()
