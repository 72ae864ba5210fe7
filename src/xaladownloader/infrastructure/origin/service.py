"""Process-wide, read-mostly holder of the catalog origin."""

from __future__ import annotations

import asyncio
import threading

import structlog

from xaladownloader.domain.entities import Origin
from xaladownloader.domain.ports import SettingsStorePort

log = structlog.get_logger(__name__)


class OriginService:
    """Injectable origin value with shared reads and exclusive writes.

    ``set()`` holds the writer lock while persisting and only swaps the
    in-memory value after the settings store accepted it (persist, then
    swap).  A failed save leaves the current origin untouched.
    """

    def __init__(
        self,
        initial: Origin,
        store: SettingsStorePort,
        *,
        degraded: bool = False,
    ) -> None:
        self._origin = initial
        self._store = store
        self._degraded = degraded
        self._swap_lock = threading.Lock()
        self._write_lock = asyncio.Lock()

    def get(self) -> Origin:
        with self._swap_lock:
            return self._origin

    @property
    def degraded(self) -> bool:
        """True while running on the fallback origin after failed discovery."""
        return self._degraded

    async def set(self, origin: Origin) -> None:
        async with self._write_lock:
            await asyncio.to_thread(self._store.save, origin)
            with self._swap_lock:
                previous = self._origin
                self._origin = origin
                self._degraded = False
        log.info("origin_updated", previous=previous.url, current=origin.url)
