"""Schema adapters, one per upstream deployment generation."""

from __future__ import annotations

from xaladownloader.domain.entities import UpstreamGeneration
from xaladownloader.domain.ports import SchemaAdapterPort

from .html_v1 import HtmlV1Adapter
from .json_api_v1 import JsonApiV1Adapter
from .json_api_v2 import JsonApiV2Adapter

_ADAPTERS: dict[UpstreamGeneration, type] = {
    UpstreamGeneration.HTML_V1: HtmlV1Adapter,
    UpstreamGeneration.JSON_API_V1: JsonApiV1Adapter,
    UpstreamGeneration.JSON_API_V2: JsonApiV2Adapter,
}


def create_adapter(generation: UpstreamGeneration | str) -> SchemaAdapterPort:
    """Return the adapter for *generation*; raises ``ValueError`` if unknown."""
    return _ADAPTERS[UpstreamGeneration(generation)]()


__all__ = [
    "HtmlV1Adapter",
    "JsonApiV1Adapter",
    "JsonApiV2Adapter",
    "create_adapter",
]
