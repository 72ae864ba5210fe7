"""Readiness flag plus tracking of in-flight video transfers."""

from __future__ import annotations

import asyncio

import structlog

log = structlog.get_logger(__name__)


class GracefulShutdown:
    """Readiness for ``/readyz`` and a drain point for running downloads.

    A relayed video outlives the request handler (the body is streamed
    after the handler returned), so transfers are counted by the response
    object itself rather than by the request middleware::

        gs.transfer_started()
        try:
            ...  # copy bytes
        finally:
            gs.transfer_finished()

        # In lifespan finally:
        await gs.wait_for_drain(timeout=5.0)
    """

    def __init__(self) -> None:
        self._active = 0
        self._shutting_down = False
        self._drained = asyncio.Event()
        self._drained.set()
        self._ready = False

    @property
    def active_transfers(self) -> int:
        return self._active

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    @property
    def is_ready(self) -> bool:
        """True once startup finished and until shutdown begins."""
        return self._ready and not self._shutting_down

    def mark_ready(self) -> None:
        self._ready = True

    def transfer_started(self) -> None:
        self._active += 1
        self._drained.clear()

    def transfer_finished(self) -> None:
        self._active -= 1
        if self._active <= 0:
            self._active = 0
            self._drained.set()

    async def wait_for_drain(self, *, timeout: float = 5.0) -> None:
        """Stop reporting ready and wait up to *timeout* for transfers to end."""
        self._shutting_down = True
        if self._active == 0:
            return
        log.info("graceful_shutdown_draining", active_transfers=self._active)
        try:
            await asyncio.wait_for(self._drained.wait(), timeout=timeout)
            log.info("graceful_shutdown_drained")
        except TimeoutError:
            log.warning(
                "graceful_shutdown_timeout",
                remaining_transfers=self._active,
                timeout=timeout,
            )
