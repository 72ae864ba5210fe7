"""Tests for the settings file store and the shared origin service."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
import yaml

from xaladownloader.domain.entities import Origin, PersistenceError
from xaladownloader.infrastructure.origin.service import OriginService
from xaladownloader.infrastructure.persistence.settings_file import YamlSettingsStore

DEFAULT = Origin.parse("https://api.purstream.to")
NEW = Origin.parse("https://api.new-domain.to")


# ---------------------------------------------------------------------------
# YamlSettingsStore
# ---------------------------------------------------------------------------


class TestYamlSettingsStore:
    def test_creates_file_with_default(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        store = YamlSettingsStore(path)

        assert store.load_or_create(DEFAULT) == DEFAULT
        assert yaml.safe_load(path.read_text(encoding="utf-8")) == {
            "base_url": "https://api.purstream.to"
        }

    def test_reads_existing(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("base_url: http://www.stored.to/\n", encoding="utf-8")
        assert YamlSettingsStore(path).load_or_create(DEFAULT).url == (
            "https://www.stored.to"
        )

    @pytest.mark.parametrize("content", ["- a\n- b\n", "other: 1\n", "base_url: ''\n"])
    def test_unreadable_falls_back(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(content, encoding="utf-8")
        assert YamlSettingsStore(path).load_or_create(DEFAULT) == DEFAULT
        assert path.read_text(encoding="utf-8") == content

    def test_save_replaces_atomically(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "settings.yaml"
        store = YamlSettingsStore(path)
        store.save(DEFAULT)
        store.save(NEW)

        assert yaml.safe_load(path.read_text(encoding="utf-8")) == {
            "base_url": NEW.url
        }
        assert sorted(p.name for p in path.parent.iterdir()) == ["settings.yaml"]

    def test_save_failure_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        store = YamlSettingsStore(blocker / "settings.yaml")
        with pytest.raises(PersistenceError):
            store.save(NEW)


# ---------------------------------------------------------------------------
# OriginService
# ---------------------------------------------------------------------------


class _RecordingStore:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.saved: list[Origin] = []
        self.service: OriginService | None = None
        self.seen_during_save: list[Origin] = []

    def load_or_create(self, default: Origin) -> Origin:
        return default

    def save(self, origin: Origin) -> None:
        if self.service is not None:
            self.seen_during_save.append(self.service.get())
        if self.fail:
            raise PersistenceError("disk full")
        self.saved.append(origin)


class TestOriginService:
    def test_initial_value(self) -> None:
        service = OriginService(DEFAULT, _RecordingStore(), degraded=True)
        assert service.get() == DEFAULT
        assert service.degraded

    async def test_persist_then_swap(self) -> None:
        store = _RecordingStore()
        service = OriginService(DEFAULT, store, degraded=True)
        store.service = service

        await service.set(NEW)

        assert store.saved == [NEW]
        assert store.seen_during_save == [DEFAULT]
        assert service.get() == NEW
        assert not service.degraded

    async def test_failed_save_keeps_value(self) -> None:
        service = OriginService(DEFAULT, _RecordingStore(fail=True))
        with pytest.raises(PersistenceError):
            await service.set(NEW)
        assert service.get() == DEFAULT

    async def test_concurrent_writers_serialized(self) -> None:
        store = _RecordingStore()
        service = OriginService(DEFAULT, store)
        others = [Origin.parse(f"https://api.d{i}.to") for i in range(5)]

        await asyncio.gather(*(service.set(o) for o in others))

        assert sorted(o.url for o in store.saved) == sorted(o.url for o in others)
        assert service.get() in others
