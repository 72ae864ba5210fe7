"""Streaming response that owns a :class:`StreamTransfer`."""

from __future__ import annotations

import anyio
import structlog
from starlette.requests import ClientDisconnect
from starlette.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from xaladownloader.infrastructure.graceful_shutdown import GracefulShutdown
from xaladownloader.infrastructure.streaming import StreamTransfer

log = structlog.get_logger(__name__)


class VideoStreamResponse(StreamingResponse):
    """Relays a video body; a vanished client ends the transfer quietly.

    The upstream connection is closed whether the copy completed, the
    client went away or the upstream failed.
    """

    def __init__(
        self,
        transfer: StreamTransfer,
        *,
        tracker: GracefulShutdown | None = None,
    ) -> None:
        super().__init__(
            transfer.iter_body(),
            status_code=200,
            headers=transfer.headers(),
            media_type=transfer.media_type,
        )
        self.transfer = transfer
        self._tracker = tracker

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self._tracker is not None:
            self._tracker.transfer_started()
        try:
            await super().__call__(scope, receive, send)
        except (OSError, ClientDisconnect) as exc:
            self.transfer.mark_cancelled()
            log.info(
                "client_disconnected",
                filename=self.transfer.filename,
                bytes=self.transfer.bytes_sent,
                error=type(exc).__name__,
            )
        finally:
            with anyio.CancelScope(shield=True):
                await self.transfer.aclose()
            if self._tracker is not None:
                self._tracker.transfer_finished()
