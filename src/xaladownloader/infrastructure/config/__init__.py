from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, UpstreamConfig

__all__ = ["AppConfig", "EnvOverrides", "UpstreamConfig", "load_config"]
