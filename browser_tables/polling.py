"""
Browser Tables - Polling

Bounded retry loop for conditions that hold eventually. A failing check
means "not yet"; only the deadline turns the last failure into an error.
"""

import asyncio
import inspect
import logging
import re
import time
from typing import Any, Awaitable, Callable, Optional, Union

from .config import CONFIG
from .errors import PollTimeout

logger = logging.getLogger(__name__)

Check = Callable[[], Union[Awaitable[Any], Any]]

_CALL_LOG = re.compile(r"\n*\s*Call log:.*\Z", re.DOTALL)
_PREDICATE_TIMEOUT = re.compile(r"^\s*Timeout \d+ms exceeded( while waiting on the predicate)?\.?\s*$", re.MULTILINE)


def clean_error_message(error: BaseException) -> str:
    """Message of ``error`` without Playwright's call log and timeout banner"""
    message = str(error)
    message = _CALL_LOG.sub("", message)
    message = _PREDICATE_TIMEOUT.sub("", message).strip()
    return message or type(error).__name__


async def poll(
    check: Check,
    timeout: Optional[int] = None,
    interval: Optional[int] = None,
    context: Optional[str] = None,
) -> None:
    """
    Call ``check`` until it returns without raising.

    Args:
        check: Zero-argument callable, sync or async
        timeout: Overall deadline in milliseconds (default CONFIG.POLL_TIMEOUT)
        interval: Pause between attempts in milliseconds (default CONFIG.POLL_INTERVAL)
        context: Optional label prefixed to the final error as ``[Context: <label>]``

    Raises:
        PollTimeout: carrying the last failure's message once the deadline passes
            (also when a retry succeeds only after the deadline)
    """
    timeout = CONFIG.POLL_TIMEOUT if timeout is None else timeout
    interval = CONFIG.POLL_INTERVAL if interval is None else interval
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got: {timeout}")
    if interval < 0:
        raise ValueError(f"interval must not be negative, got: {interval}")

    deadline = time.monotonic() + timeout / 1000
    last_error: Optional[Exception] = None
    attempts = 0

    while time.monotonic() < deadline:
        attempts += 1
        try:
            result = check()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            last_error = e
            logger.debug(f"Attempt {attempts} not met yet: {clean_error_message(e)}")
        else:
            # A retry that only succeeds after the deadline still times out.
            if last_error is not None and time.monotonic() >= deadline:
                logger.debug(f"Attempt {attempts} succeeded after the deadline")
                break
            if attempts > 1:
                logger.debug(f"Condition met after {attempts} attempts")
            return

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        await asyncio.sleep(min(interval / 1000, remaining))

    message = clean_error_message(last_error) if last_error else "Polling timeout reached"
    if context:
        message = f"[Context: {context}] {message}"
    logger.warning(f"⏱️ Polling gave up after {attempts} attempts ({timeout}ms): {message.splitlines()[0]}")
    raise PollTimeout(message, last_error) from last_error
