"""
Browser Tables - Errors

Exception taxonomy for grid extraction and polling.
"""

from typing import Optional


# ============== CUSTOM EXCEPTIONS ==============

class TableError(Exception):
    """Base exception for table operations"""

    def with_message(self, message: str) -> "TableError":
        """Same error (type and attributes) carrying a new message"""
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.args = (message,)
        return clone


class InvalidSpanAttribute(TableError, ValueError):
    """A rowspan/colspan attribute is not a positive integer"""

    def __init__(self, attribute: str, raw_value: str, message: Optional[str] = None):
        self.attribute = attribute
        self.raw_value = raw_value
        super().__init__(message or f'Invalid {attribute} attribute: "{raw_value}"')


class CellAccessError(TableError):
    """A cell locator no longer resolves to an element"""
    pass


class EmptyResult(TableError):
    """No rows, or no cells with content, where at least one was required"""
    pass


class HeaderNotFound(TableError, LookupError):
    """Requested header is not part of the main header row"""
    pass


class PollTimeout(TableError, TimeoutError):
    """Deadline reached without a successful check.

    The message is the last underlying failure's message, not a generic
    timeout notice. The failure itself is kept on ``last_error``.
    """

    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        self.last_error = last_error
        super().__init__(message)


class StabilityTimeout(PollTimeout):
    """The table kept changing for the whole deadline"""

    def __init__(self, message: str, stability_duration: int, source: str,
                 last_error: Optional[BaseException] = None):
        self.stability_duration = stability_duration
        self.source = source
        super().__init__(message, last_error)
