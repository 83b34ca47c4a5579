"""
In-flight guard for user-triggered writes.

A user action (import, bulk status apply, bulk delete) must never issue
two concurrent writes for the same logical operation. The guard tracks
which operation keys are currently running; a second entry for a key
that is still held fails immediately instead of queueing.

Single event loop, no locks needed: check-and-add happens without an
await in between.
"""

import logging
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from setkeeper.models.failure import OperationInFlightError

logger = logging.getLogger(__name__)


@dataclass
class OperationGuard:
    """Tracks operation keys that currently have a write in flight."""

    _in_flight: set[Hashable] = field(default_factory=set)

    def is_held(self, key: Hashable) -> bool:
        return key in self._in_flight

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """
        Hold `key` for the duration of the block.

        Raises:
            OperationInFlightError: If `key` is already held.
        """
        if key in self._in_flight:
            logger.warning("operation_already_in_flight", extra={"operation": str(key)})
            raise OperationInFlightError(str(key))
        self._in_flight.add(key)
        try:
            yield
        finally:
            self._in_flight.discard(key)


# Process-wide guard used by the API layer
operation_guard = OperationGuard()
