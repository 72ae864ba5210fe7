"""Catalog search use case: text query to normalized media records."""

from __future__ import annotations

import structlog

from xaladownloader.domain.entities import MediaRecord, ValidationError
from xaladownloader.domain.ports import (
    OriginProviderPort,
    SchemaAdapterPort,
    UpstreamGatewayPort,
)

log = structlog.get_logger(__name__)


class CatalogSearchUseCase:
    """Searches the catalog through the active schema adapter.

    Stateless; safe to call concurrently.  Upstream failures propagate as
    ``UpstreamError`` from the gateway or the adapter.
    """

    def __init__(
        self,
        adapter: SchemaAdapterPort,
        upstream: UpstreamGatewayPort,
        origin: OriginProviderPort,
    ) -> None:
        self._adapter = adapter
        self._upstream = upstream
        self._origin = origin

    async def search(self, query: str) -> list[MediaRecord]:
        query = (query or "").strip()
        if not query:
            raise ValidationError("missing ?q= parameter")

        body = await self._upstream.fetch(
            self._adapter.search_path(query),
            accept=self._accept,
        )
        records = self._adapter.decode_search(body, self._origin.get())
        log.info(
            "catalog_search",
            query=query,
            results=len(records),
            generation=self._adapter.generation.value,
        )
        return records

    @property
    def _accept(self) -> str:
        return "application/json" if self._adapter.has_json_api else "text/html"
