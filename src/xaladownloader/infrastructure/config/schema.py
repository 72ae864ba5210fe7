"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from xaladownloader.domain.entities import Origin, UpstreamGeneration

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/141.0.0.0 Safari/537.36"
)


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class UpstreamConfig(BaseModel):
    """Where the catalog lives and how it is talked to.

    All values configurable via YAML (upstream section) or ENV vars.
    """

    generation: UpstreamGeneration = Field(
        default=UpstreamGeneration.JSON_API_V1,
        description="Deployment generation of the catalog (selects the adapter).",
    )

    bootstrap_url: str = Field(
        default="https://xalaflix.fr",
        description="Stable landing page that links to the current catalog origin.",
    )
    fallback_origin: str = Field(
        default="https://api.purstream.to",
        description="Last-known-good origin used when discovery fails.",
    )
    catalog_domain_hint: str = Field(
        default="purstream",
        description="Substring identifying catalog links on the bootstrap page.",
    )
    rewrite_to_api_host: bool = Field(
        default=True,
        description="Rewrite discovered www.<domain> hosts to api.<domain>.",
    )
    discovery_enabled: bool = Field(
        default=True,
        description="Run origin discovery at startup (else use the stored origin).",
    )

    discovery_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for fetching the bootstrap page.",
    )
    metadata_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for search, listing and playback metadata calls.",
    )
    proxy_connect_timeout_seconds: float = Field(
        default=15.0,
        description="Connect timeout for the video stream (reads are unbounded).",
    )

    @field_validator("fallback_origin")
    @classmethod
    def _validate_origin(cls, v: str) -> str:
        return Origin.parse(v).url

    @field_validator(
        "discovery_timeout_seconds",
        "metadata_timeout_seconds",
        "proxy_connect_timeout_seconds",
    )
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @property
    def is_json_api(self) -> bool:
        return self.generation is not UpstreamGeneration.HTML_V1


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/upstream/logging/settings).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="xaladownloader", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP client (YAML section: http.*)
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default=BROWSER_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests (the catalog expects a browser).",
    )

    # Persisted settings record (YAML section: settings.path)
    settings_path: Path = Field(
        default=Path("./xaladownloader-settings.yaml"),
        validation_alias=AliasChoices(
            "settings_path",
            AliasPath("settings", "path"),
        ),
        description="File holding the persisted {base_url} record.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Catalog (YAML section: upstream.*)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)

    @field_validator("settings_path", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "settings": {"path": str(self.settings_path)},
            "logging": {"level": self.log_level, "format": self.log_format},
            "upstream": self.upstream.model_dump(mode="json"),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read XALADL_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - XALADL_UPSTREAM_GENERATION
    - XALADL_UPSTREAM_FALLBACK_ORIGIN
    - XALADL_SETTINGS_PATH
    - XALADL_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="XALADL_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    settings_path: Optional[Path] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    upstream_generation: Optional[UpstreamGeneration] = None
    upstream_bootstrap_url: Optional[str] = None
    upstream_fallback_origin: Optional[str] = None
    upstream_discovery_enabled: Optional[bool] = None
    upstream_metadata_timeout_seconds: Optional[float] = None

    @field_validator("settings_path", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
