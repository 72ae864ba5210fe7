"""YAML-backed storage for the persisted ``{base_url}`` settings record."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import structlog
import yaml

from xaladownloader.domain.entities import Origin, PersistenceError

log = structlog.get_logger(__name__)


class YamlSettingsStore:
    """Reads and atomically rewrites the settings file.

    The file holds a single mapping ``{base_url: <origin>}``.  Writes go to
    a temporary file in the same directory which then replaces the target,
    so a crash never leaves a half-written record behind.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load_or_create(self, default: Origin) -> Origin:
        """Return the stored origin, creating the file with *default* if absent.

        An unreadable or invalid record is reported and replaced by *default*
        in memory only; the broken file is left for inspection.
        """
        if not self._path.exists():
            self.save(default)
            log.info("settings_created", path=str(self._path), base_url=default.url)
            return default

        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
            return Origin.parse(str(data["base_url"]))
        except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as exc:
            log.warning(
                "settings_unreadable",
                path=str(self._path),
                error=str(exc),
                fallback=default.url,
            )
            return default

    def save(self, origin: Origin) -> None:
        """Persist *origin*; raises ``PersistenceError`` on any I/O failure."""
        payload = yaml.safe_dump({"base_url": origin.url}, sort_keys=False)
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", dir=self._path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            raise PersistenceError(
                f"cannot write settings to {self._path}: {exc}"
            ) from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
