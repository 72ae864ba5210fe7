"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from xaladownloader.infrastructure.config import AppConfig
from xaladownloader.infrastructure.graceful_shutdown import GracefulShutdown

if TYPE_CHECKING:
    from xaladownloader.application.use_cases import (
        CatalogBrowseUseCase,
        CatalogSearchUseCase,
        DownloadUseCase,
        PlaybackLocator,
    )
    from xaladownloader.domain.ports import SchemaAdapterPort
    from xaladownloader.infrastructure.origin import OriginService
    from xaladownloader.infrastructure.streaming import StreamingProxy


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    origin: OriginService
    adapter: SchemaAdapterPort
    streaming_proxy: StreamingProxy

    # Application services
    catalog_search: CatalogSearchUseCase
    catalog_browse: CatalogBrowseUseCase
    playback_locator: PlaybackLocator
    download: DownloadUseCase

    # Readiness + in-flight transfers
    graceful_shutdown: GracefulShutdown
