"""Readers/writer lock for asyncio code."""

import asyncio

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ReadWriteLock:
    """An asyncio lock that admits many readers or a single writer.

    Any number of coroutines may hold the lock through `read()` at the same
    time. A coroutine holding it through `write()` excludes every reader and
    every other writer. Writers that are already waiting are served before
    newly arriving readers, so a steady stream of reads cannot starve them.

    The lock is not thread-safe; it must only be used from one event loop.
    """

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def readers(self) -> int:
        """Number of coroutines currently holding the lock for reading."""
        return self._readers

    @property
    def writing(self) -> bool:
        """Whether a writer currently holds the lock."""
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        """Holds the lock in shared mode for the body of the `async with`."""
        async with self._condition:
            await self._condition.wait_for(
                lambda: not self._writer and not self._waiting_writers
            )
            self._readers += 1
        try:
            yield
        finally:
            # Counters change before any await so a cancellation during the
            # wake-up below cannot leave the lock held.
            self._readers -= 1
            if not self._readers:
                await self._notify_waiters()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        """Holds the lock in exclusive mode for the body of the `async with`."""
        async with self._condition:
            self._waiting_writers += 1
            try:
                await self._condition.wait_for(
                    lambda: not self._writer and not self._readers
                )
            finally:
                self._waiting_writers -= 1
                # Readers parked behind a cancelled writer must re-check.
                self._condition.notify_all()
            self._writer = True
        try:
            yield
        finally:
            self._writer = False
            await self._notify_waiters()

    async def _notify_waiters(self) -> None:
        async def notify() -> None:
            async with self._condition:
                self._condition.notify_all()

        await asyncio.shield(notify())
