"""Port for fetching documents from the upstream catalog."""

from __future__ import annotations

from typing import Protocol


class UpstreamGatewayPort(Protocol):
    """Fetches raw response bodies relative to the current origin.

    Raises ``UpstreamError`` on network failure or a non-200 status.
    """

    async def fetch(
        self,
        path: str,
        *,
        timeout: float | None = None,
        accept: str = "application/json",
    ) -> str: ...
