"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

from .schema import BROWSER_USER_AGENT

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "xaladownloader",
    "environment": "dev",
    "http": {
        "follow_redirects": True,
        "user_agent": BROWSER_USER_AGENT,
    },
    "settings": {
        "path": "./xaladownloader-settings.yaml",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "upstream": {
        "generation": "json_api_v1",
        "bootstrap_url": "https://xalaflix.fr",
        "fallback_origin": "https://api.purstream.to",
        "catalog_domain_hint": "purstream",
        "rewrite_to_api_host": True,
        "discovery_enabled": True,
        "discovery_timeout_seconds": 10.0,
        "metadata_timeout_seconds": 15.0,
        "proxy_connect_timeout_seconds": 15.0,
    },
}
