"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from xaladownloader.application.use_cases import (
    CatalogBrowseUseCase,
    CatalogSearchUseCase,
    DownloadUseCase,
    PlaybackLocator,
)
from xaladownloader.domain.entities import (
    DiscoveryError,
    Origin,
    PersistenceError,
)
from xaladownloader.infrastructure.catalog import HttpxUpstreamGateway, create_adapter
from xaladownloader.infrastructure.config.schema import AppConfig
from xaladownloader.infrastructure.origin import OriginDiscovery, OriginService
from xaladownloader.infrastructure.persistence import YamlSettingsStore
from xaladownloader.infrastructure.streaming import StreamingProxy
from xaladownloader.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

SHUTDOWN_DRAIN_TIMEOUT_SECONDS = 5.0


def _load_persisted_origin(store: YamlSettingsStore, config: AppConfig) -> Origin:
    fallback = Origin.parse(config.upstream.fallback_origin)
    try:
        return store.load_or_create(fallback)
    except PersistenceError as exc:
        log.warning("settings_unavailable", path=str(store.path), error=str(exc))
        return fallback


async def _resolve_origin(
    http_client: httpx.AsyncClient,
    config: AppConfig,
    persisted: Origin,
) -> tuple[Origin, bool]:
    """Discovered origin, or ``(persisted, degraded=True)`` when discovery fails."""
    if not config.upstream.discovery_enabled:
        log.info("origin_discovery_disabled", origin=persisted.url)
        return persisted, False

    discovery = OriginDiscovery(
        http_client, config.upstream, user_agent=config.http_user_agent
    )
    try:
        return await discovery.discover(), False
    except DiscoveryError as exc:
        log.warning(
            "origin_discovery_failed",
            error=str(exc),
            fallback=persisted.url,
        )
        return persisted, True


def wire_services(state: AppState, origin: OriginService) -> None:
    """Build the adapter, gateways and use cases around *origin*."""
    config = state.config
    state.origin = origin
    state.adapter = create_adapter(config.upstream.generation)

    upstream = HttpxUpstreamGateway(
        state.http_client,
        origin,
        user_agent=config.http_user_agent,
        default_timeout=config.upstream.metadata_timeout_seconds,
    )
    state.streaming_proxy = StreamingProxy(
        state.http_client,
        origin,
        user_agent=config.http_user_agent,
        connect_timeout=config.upstream.proxy_connect_timeout_seconds,
    )

    state.catalog_search = CatalogSearchUseCase(state.adapter, upstream, origin)
    state.catalog_browse = CatalogBrowseUseCase(state.adapter, upstream, origin)
    state.playback_locator = PlaybackLocator(state.adapter, upstream, origin)
    state.download = DownloadUseCase(
        state.playback_locator, numeric_ids=state.adapter.has_json_api
    )
    log.info(
        "services_wired",
        generation=state.adapter.generation.value,
        strategies=state.playback_locator.strategy_names,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP client (shared by discovery, catalog calls and the proxy)
        2. Persisted origin (settings file, created if absent)
        3. Origin discovery (falls back to the persisted origin)
        4. Adapter, gateways, use cases
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client (no retries: failures are reported, not replayed)
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.upstream.metadata_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.info("http_client_initialized")

    try:
        # 2) Persisted origin
        store = YamlSettingsStore(config.settings_path)
        persisted = _load_persisted_origin(store, config)

        # 3) Discovery
        current, degraded = await _resolve_origin(state.http_client, config, persisted)
        origin = OriginService(current, store, degraded=degraded)
        log.info("origin_selected", origin=current.url, degraded=degraded)

        # 4) Services
        wire_services(state, origin)

        state.graceful_shutdown.mark_ready()
        log.info("app_startup_complete")

        yield
    finally:
        await state.graceful_shutdown.wait_for_drain(
            timeout=SHUTDOWN_DRAIN_TIMEOUT_SECONDS
        )
        await state.http_client.aclose()
        log.info("http_client_closed")
        log.info("app_shutdown_complete")
