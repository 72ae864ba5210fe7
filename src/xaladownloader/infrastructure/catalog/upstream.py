"""httpx gateway for catalog requests relative to the current origin."""

from __future__ import annotations

import httpx
import structlog

from xaladownloader.domain.entities import UpstreamError
from xaladownloader.domain.ports import OriginProviderPort

log = structlog.get_logger(__name__)


class HttpxUpstreamGateway:
    """Fetches catalog documents; every failure surfaces as ``UpstreamError``.

    No retries: a failed call is reported to the caller as-is.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        origin: OriginProviderPort,
        *,
        user_agent: str,
        default_timeout: float,
    ) -> None:
        self._http = http_client
        self._origin = origin
        self._user_agent = user_agent
        self._default_timeout = default_timeout

    async def fetch(
        self,
        path: str,
        *,
        timeout: float | None = None,
        accept: str = "application/json",
    ) -> str:
        """GET *path* (resolved against the origin) and return the body text."""
        url = self._origin.get().join(path)
        try:
            resp = await self._http.get(
                url,
                headers={"User-Agent": self._user_agent, "Accept": accept},
                timeout=timeout or self._default_timeout,
            )
        except httpx.TimeoutException as exc:
            log.warning("upstream_timeout", url=url)
            raise UpstreamError(f"upstream timed out: {url}") from exc
        except httpx.HTTPError as exc:
            log.warning("upstream_fetch_error", url=url, error=str(exc))
            raise UpstreamError(f"upstream unreachable: {exc}") from exc

        if resp.status_code != 200:
            log.warning("upstream_http_error", url=url, status=resp.status_code)
            raise UpstreamError(f"unexpected status {resp.status_code} from {url}")

        return resp.text
