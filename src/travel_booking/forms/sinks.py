"""BookingSink interface for accepted booking records.

A sink is the collaborator that receives a record once the form accepts a
submission: a log, a display, or the client of a real reservation backend.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any


class BookingSink(ABC):
    """Interface for delivering accepted booking records (DIP)."""

    @abstractmethod
    async def deliver(self, record: dict[str, Any]) -> None:
        """Hand over an accepted booking record."""
        ...


class LoggingBookingSink(BookingSink):
    """Logs every accepted record at INFO level."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    async def deliver(self, record: dict[str, Any]) -> None:
        """Write the record to the log."""
        self._logger.info(f"Booking record: {record}", extra={"booking": record})


class BufferedBookingSink(BookingSink):
    """Buffers records for testing or batch delivery."""

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []

    async def deliver(self, record: dict[str, Any]) -> None:
        """Append record to buffer."""
        self.records.append(record)

    def clear(self) -> None:
        """Clear the record buffer."""
        self.records.clear()
