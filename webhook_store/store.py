"""In-memory webhook store.

Keeps the most recent payloads received by the service. A bounded store
evicts its oldest entry once ``max_size`` is exceeded and lists entries
newest first; an unbounded store keeps everything and lists in arrival
order. IDs increase by one per stored webhook and restart at 1 only after
``clear()``.
"""
import asyncio
from collections import deque
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Deque, List, Optional

from pydantic import JsonValue

from webhook_store.models import StoredWebhook


class ReadWriteLock:
    """Shared/exclusive lock for coroutines.

    Any number of readers may hold the lock together. A writer holds it
    alone. Once a writer is waiting, new readers queue behind it.
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    @asynccontextmanager
    async def reading(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writing and self._writers_waiting == 0
            )
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @asynccontextmanager
    async def writing(self) -> AsyncIterator[None]:
        async with self._cond:
            self._writers_waiting += 1
            try:
                await self._cond.wait_for(
                    lambda: not self._writing and self._readers == 0
                )
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            async with self._cond:
                self._writing = False
                self._cond.notify_all()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writing_now(self) -> bool:
        return self._writing


class WebhookStore:
    def __init__(self, max_size: Optional[int] = None) -> None:
        if max_size is not None and max_size < 0:
            raise ValueError(f"max_size must be >= 0, got {max_size}")
        # 0 and None both mean "no limit"
        self._max_size = max_size or None
        self._webhooks: Deque[StoredWebhook] = deque(maxlen=self._max_size)
        self._next_id = 1
        self._lock = ReadWriteLock()

    @property
    def max_size(self) -> Optional[int]:
        return self._max_size

    @property
    def bounded(self) -> bool:
        return self._max_size is not None

    async def add(self, payload: JsonValue) -> int:
        """Store ``payload`` and return the ID assigned to it."""
        webhook = await self.put(payload)
        return webhook.id

    async def put(self, payload: JsonValue) -> StoredWebhook:
        """Store ``payload`` and return the full record.

        The deque's ``maxlen`` drops the oldest entry when a bounded store
        overflows.
        """
        async with self._lock.writing():
            webhook = StoredWebhook(
                id=self._next_id,
                payload=payload,
                received=datetime.now(timezone.utc),
            )
            self._webhooks.append(webhook)
            self._next_id += 1
            return webhook

    async def get_all(self) -> List[StoredWebhook]:
        """Snapshot of the stored webhooks in display order."""
        async with self._lock.reading():
            if self.bounded:
                return list(reversed(self._webhooks))
            return list(self._webhooks)

    async def get_by_id(self, webhook_id: int) -> Optional[StoredWebhook]:
        async with self._lock.reading():
            return next((w for w in self._webhooks if w.id == webhook_id), None)

    async def clear(self) -> int:
        """Drop every stored webhook and restart IDs at 1.

        Returns how many webhooks were dropped.
        """
        async with self._lock.writing():
            count = len(self._webhooks)
            self._webhooks.clear()
            self._next_id = 1
            return count

    async def count(self) -> int:
        async with self._lock.reading():
            return len(self._webhooks)
