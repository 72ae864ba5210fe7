"""Ports for the shared Origin value and its persistence."""

from __future__ import annotations

from typing import Protocol

from xaladownloader.domain.entities import Origin


class OriginProviderPort(Protocol):
    """Read-mostly access to the catalog's current origin."""

    def get(self) -> Origin: ...

    async def set(self, origin: Origin) -> None:
        """Persist *origin*, then make it the current value."""
        ...


class SettingsStorePort(Protocol):
    """Durable storage for the ``{base_url}`` settings record."""

    def load_or_create(self, default: Origin) -> Origin: ...

    def save(self, origin: Origin) -> None: ...
