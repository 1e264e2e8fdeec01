"""Asynchronous email uniqueness check.

The check consults an :class:`EmailDirectory` after a fixed delay, modelling a
round trip to a user database. The directory is injected so a real backend
(or a test double) can replace the in-memory one without touching the
validator.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Iterable
from typing import Any, Literal, Protocol

from travel_booking.core.constants import EMAIL_TAKEN, LOOKUP_FAILED
from travel_booking.core.types import ValidationErrors

logger = logging.getLogger(__name__)

LookupErrorPolicy = Literal["fail", "accept"]


class EmailDirectory(Protocol):
    """Interface for the registered-email lookup."""

    def exists(self, email: str) -> bool | Awaitable[bool]:
        """Return True if the email is already registered.

        Implementations may be synchronous or return an awaitable. Raising
        (e.g. ``LookupFailedError``) signals that the lookup could not be
        completed.
        """
        ...


class InMemoryEmailDirectory:
    """Email directory backed by a set. Matching is exact."""

    def __init__(self, emails: Iterable[str] = ()) -> None:
        self._emails = set(emails)

    def exists(self, email: str) -> bool:
        return email in self._emails

    def add(self, email: str) -> None:
        self._emails.add(email)

    def __len__(self) -> int:
        return len(self._emails)


class EmailUniquenessValidator:
    """Async validator reporting ``emailTaken`` for registered emails.

    Args:
        directory: Lookup consulted for each check
        delay: Seconds to wait before the lookup
        timeout: Seconds allowed for the lookup itself (None waits forever)
        on_lookup_error: ``"fail"`` reports ``lookupFailed`` when the lookup
            raises or times out, ``"accept"`` lets the value through
    """

    def __init__(
        self,
        directory: EmailDirectory,
        *,
        delay: float = 1.0,
        timeout: float | None = None,
        on_lookup_error: LookupErrorPolicy = "fail",
    ) -> None:
        self.directory = directory
        self.delay = delay
        self.timeout = timeout
        self.on_lookup_error = on_lookup_error

    async def __call__(self, value: Any) -> ValidationErrors | None:
        email = "" if value is None else str(value)
        await asyncio.sleep(self.delay)

        try:
            if self.timeout is None:
                exists = await self._lookup(email)
            else:
                exists = await asyncio.wait_for(self._lookup(email), self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Email lookup timed out",
                extra={"timeout": self.timeout, "policy": self.on_lookup_error},
            )
            return self._lookup_failed()
        except Exception as e:
            logger.warning(
                f"Email lookup failed: {e}",
                extra={"policy": self.on_lookup_error},
                exc_info=True,
            )
            return self._lookup_failed()

        if exists:
            logger.debug("Email already registered")
            return {EMAIL_TAKEN: True}
        return None

    async def _lookup(self, email: str) -> bool:
        result = self.directory.exists(email)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    def _lookup_failed(self) -> ValidationErrors | None:
        if self.on_lookup_error == "accept":
            return None
        return {LOOKUP_FAILED: True}
