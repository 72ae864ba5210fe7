"""Schema adapter for the second JSON API generation.

Same endpoints and envelopes as :mod:`json_api_v1`; only record fields
changed: the poster moved to ``large_poster_path`` and ``runtime`` became
an integer number of minutes.
"""

from __future__ import annotations

from typing import Any

from xaladownloader.domain.entities import Origin, UpstreamGeneration
from xaladownloader.infrastructure.common.urls import absolutize

from .json_api_v1 import JsonApiV1Adapter


class JsonApiV2Adapter(JsonApiV1Adapter):
    generation = UpstreamGeneration.JSON_API_V2

    def _poster(self, raw: dict[str, Any], origin: Origin) -> str:
        path = raw.get("large_poster_path")
        if path is None or path == "":
            return ""
        if not isinstance(path, str):
            raise TypeError("large_poster_path is not a string")
        return absolutize(path, origin)

    def _runtime(self, raw: dict[str, Any]) -> str | None:
        runtime = raw.get("runtime")
        if runtime is None or runtime == "":
            return None
        if isinstance(runtime, bool):
            raise TypeError("runtime is not a number")
        minutes = int(runtime)
        return f"{minutes} min" if minutes > 0 else None
