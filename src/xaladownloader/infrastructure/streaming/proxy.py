"""Relay a remote video to the client without buffering it.

The upstream response is opened with ``stream=True`` and copied in
64 KiB chunks.  A :class:`StreamTransfer` owns one upstream response and
tracks where the copy ended up; the upstream connection is closed on
every exit path.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from enum import Enum

import anyio
import httpx
import structlog

from xaladownloader.domain.entities import StreamSource, UpstreamError
from xaladownloader.domain.ports import OriginProviderPort
from xaladownloader.infrastructure.common.filenames import content_disposition

log = structlog.get_logger(__name__)

CHUNK_SIZE = 65536
DEFAULT_CONTENT_TYPE = "video/mp4"


class TransferState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class StreamTransfer:
    """One upstream video response being copied to one client."""

    def __init__(self, response: httpx.Response, filename: str) -> None:
        self._response = response
        self.filename = filename
        self.state = TransferState.IDLE
        self.bytes_sent = 0
        self._closed = False

    @property
    def media_type(self) -> str:
        return self._response.headers.get("content-type") or DEFAULT_CONTENT_TYPE

    @property
    def content_length(self) -> str | None:
        return self._response.headers.get("content-length")

    def headers(self) -> dict[str, str]:
        """Download headers for the client response (excluding Content-Type)."""
        out = {"Content-Disposition": content_disposition(self.filename)}
        if self.content_length:
            out["Content-Length"] = self.content_length
        return out

    def _finish(self, state: TransferState) -> None:
        if self.state is TransferState.STREAMING:
            self.state = state

    async def iter_body(self) -> AsyncIterator[bytes]:
        """Yield the upstream body chunk by chunk.

        Client disconnects end the transfer as ``CANCELLED`` and are
        re-raised so the server can unwind; upstream read errors end it
        as ``FAILED`` without raising (headers are already on the wire).
        """
        if self.state is not TransferState.IDLE:
            raise RuntimeError(f"transfer already {self.state.value}")
        self.state = TransferState.STREAMING
        log.info("stream_started", filename=self.filename, length=self.content_length)
        try:
            async for chunk in self._response.aiter_bytes(chunk_size=CHUNK_SIZE):
                self.bytes_sent += len(chunk)
                yield chunk
            self._finish(TransferState.COMPLETED)
            log.info("stream_completed", filename=self.filename, bytes=self.bytes_sent)
        except (asyncio.CancelledError, GeneratorExit):
            self._finish(TransferState.CANCELLED)
            log.info("stream_cancelled", filename=self.filename, bytes=self.bytes_sent)
            raise
        except httpx.HTTPError as exc:
            self._finish(TransferState.FAILED)
            log.warning(
                "stream_upstream_error",
                filename=self.filename,
                bytes=self.bytes_sent,
                error=str(exc),
            )
        finally:
            with anyio.CancelScope(shield=True):
                await self.aclose()

    def mark_cancelled(self) -> None:
        """Record a disconnect noticed by the server rather than the iterator."""
        if self.state in (TransferState.IDLE, TransferState.STREAMING):
            self.state = TransferState.CANCELLED
            log.info("stream_cancelled", filename=self.filename, bytes=self.bytes_sent)

    async def aclose(self) -> None:
        """Close the upstream response; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()


class StreamingProxy:
    """Opens upstream video responses with the headers the CDN expects."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        origin: OriginProviderPort,
        *,
        user_agent: str,
        connect_timeout: float,
    ) -> None:
        self._http = http_client
        self._origin = origin
        self._user_agent = user_agent
        # Bounded connect, unbounded reads: a movie may take hours to relay.
        self._timeout = httpx.Timeout(
            connect=connect_timeout, read=None, write=None, pool=connect_timeout
        )

    def request_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._user_agent,
            "Referer": self._origin.get().url,
            "Range": "bytes=0-",
            "Accept-Encoding": "identity",
        }

    async def open(self, source: StreamSource, filename: str) -> StreamTransfer:
        """Connect to *source* and return a transfer ready to be iterated.

        Raises ``UpstreamError`` when the connection fails or the upstream
        does not answer 2xx; nothing has been sent to the client by then.
        """
        request = self._http.build_request(
            "GET",
            source.url,
            headers=self.request_headers(),
            timeout=self._timeout,
        )
        try:
            resp = await self._http.send(request, stream=True, follow_redirects=True)
        except httpx.HTTPError as exc:
            log.warning("stream_connect_failed", url=source.url, error=str(exc))
            raise UpstreamError(f"error fetching video: {exc}") from exc

        if not resp.is_success:
            await resp.aclose()
            log.warning("stream_upstream_status", url=source.url, status=resp.status_code)
            raise UpstreamError(f"video host answered {resp.status_code}")

        log.debug(
            "stream_opened",
            url=source.url,
            status=resp.status_code,
            content_type=resp.headers.get("content-type"),
        )
        return StreamTransfer(resp, filename)
