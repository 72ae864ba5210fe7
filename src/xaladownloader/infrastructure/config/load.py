"""Layered configuration: defaults < config.yaml < XALADL_* env < CLI flags.

config.yaml uses the ``http``/``settings``/``logging``/``upstream``
sections. Env vars and CLI flags use flat names (``log_level``,
``upstream_generation``); those are folded into their section before the
layers are merged. The flat names are read off the models, so a new
``UpstreamConfig`` field is reachable from ``XALADL_UPSTREAM_<NAME>``
without touching this module.
"""

from __future__ import annotations

from copy import deepcopy
from functools import cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import AliasChoices, AliasPath

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides, UpstreamConfig

_UPSTREAM = "upstream"


@cache
def flat_key_map() -> dict[str, tuple[str, str]]:
    """``log_level`` → ``("logging", "level")``, ``upstream_x`` → ``("upstream", "x")``."""
    mapping: dict[str, tuple[str, str]] = {}
    for name, field in AppConfig.model_fields.items():
        alias = field.validation_alias
        if not isinstance(alias, AliasChoices):
            continue
        for choice in alias.choices:
            if isinstance(choice, AliasPath) and len(choice.path) == 2:
                section, key = choice.path
                mapping[name] = (str(section), str(key))
    for name in UpstreamConfig.model_fields:
        mapping[f"{_UPSTREAM}_{name}"] = (_UPSTREAM, name)
    return mapping


def _merge(base: dict[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in layer.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge(current, value)
        else:
            base[key] = value
    return base


def _fold_layer(layer: Mapping[str, Any], source: str) -> dict[str, Any]:
    """Bring one layer into the sectioned shape, rejecting unknown keys."""
    flat_keys = flat_key_map()
    sections = {section for section, _ in flat_keys.values()}
    folded: dict[str, Any] = {}

    for key, value in layer.items():
        if key in sections:
            if not isinstance(value, Mapping):
                raise ValueError(f"{source}: section {key!r} must be a mapping")
            _merge(folded.setdefault(key, {}), value)
        elif key in flat_keys:
            section, name = flat_keys[key]
            folded.setdefault(section, {})[name] = value
        elif key in AppConfig.model_fields:
            folded[key] = value
        else:
            raise ValueError(f"{source}: unknown config key {key!r}")
    return folded


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(
            f"{config_path}: config YAML must be a mapping, got {type(parsed).__name__}"
        )
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Merge the four layers and validate the result.

    A ``.env`` file only fills variables the process environment lacks.
    Nothing is written to disk here; the settings record is created
    lazily by the persistence layer.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[tuple[str, Mapping[str, Any]]] = [("defaults", DEFAULT_CONFIG)]
    if config_path is not None:
        layers.append((str(config_path), _read_yaml(config_path)))
    layers.append(("environment", EnvOverrides().to_update_dict()))
    layers.append(("cli", cli_overrides or {}))

    merged: dict[str, Any] = {}
    for source, layer in layers:
        _merge(merged, _fold_layer(deepcopy(dict(layer)), source))
    return AppConfig.model_validate(merged)
