"""Pydantic configuration models with validation."""

from __future__ import annotations

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

from .defaults import DEFAULT_PROVIDER_ORDER

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _split_csv(value: Any) -> Any:
    """Turn ``"a, b,,c"`` into ``["a", "b", "c"]``; leave lists alone."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class ProvidersConfig(BaseModel):
    """Which provider adapters run, and in what order."""

    order: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PROVIDER_ORDER),
        description="Search priority (first match wins).",
    )
    disabled: list[str] = Field(
        default_factory=list,
        description="Providers to skip entirely (e.g. a site that went down).",
    )
    domains: dict[str, str] = Field(
        default_factory=dict,
        description="Per-provider base URL override (mirror domains).",
    )

    @field_validator("order", "disabled", mode="before")
    @classmethod
    def _validate_names(cls, v: Any) -> Any:
        return _split_csv(v)

    @property
    def enabled(self) -> list[str]:
        """Providers in priority order with the disabled ones removed."""
        disabled = {name.lower() for name in self.disabled}
        return [name for name in self.order if name.lower() not in disabled]


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/providers/metadata/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="anisource", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP fetcher (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-request timeout in seconds.",
    )
    http_proxies: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "http_proxies",
            AliasPath("http", "proxies"),
        ),
        description="Proxy pool; one is picked at random per attempt.",
    )
    http_retries: int = Field(
        default=3,
        validation_alias=AliasChoices(
            "http_retries",
            AliasPath("http", "retries"),
        ),
        description="Retries after the first attempt.",
    )
    http_initial_delay_ms: int = Field(
        default=1000,
        validation_alias=AliasChoices(
            "http_initial_delay_ms",
            AliasPath("http", "initial_delay_ms"),
        ),
        description="Delay before the first retry, in milliseconds.",
    )
    http_backoff_factor: float = Field(
        default=1.5,
        validation_alias=AliasChoices(
            "http_backoff_factor",
            AliasPath("http", "backoff_factor"),
        ),
        description="Multiplier applied to the delay after every attempt.",
    )
    http_max_jitter_ms: int = Field(
        default=500,
        validation_alias=AliasChoices(
            "http_max_jitter_ms",
            AliasPath("http", "max_jitter_ms"),
        ),
        description="Upper bound of the random jitter added to each delay.",
    )

    # Providers (YAML section: providers.*)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)

    # Metadata (YAML section: metadata.*)
    jikan_base_url: str = Field(
        default="https://api.jikan.moe/v4",
        validation_alias=AliasChoices(
            "jikan_base_url",
            AliasPath("metadata", "jikan_base_url"),
        ),
        description="Jikan REST API base URL (MyAnimeList id -> title).",
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

    @field_validator("http_proxies", mode="before")
    @classmethod
    def _validate_proxies(cls, v: Any) -> Any:
        return _split_csv(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("http_retries", "http_initial_delay_ms", "http_max_jitter_ms")
    @classmethod
    def _validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("retry settings must be >= 0")
        return v

    @field_validator("http_backoff_factor")
    @classmethod
    def _validate_backoff(cls, v: float) -> float:
        if v < 1.0:
            raise ValueError("http_backoff_factor must be >= 1.0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.

        Proxies are reduced to a count so credentials never end up in logs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "proxies": len(self.http_proxies),
                "retries": self.http_retries,
                "initial_delay_ms": self.http_initial_delay_ms,
                "backoff_factor": self.http_backoff_factor,
                "max_jitter_ms": self.http_max_jitter_ms,
            },
            "providers": self.providers.model_dump(),
            "metadata": {"jikan_base_url": self.jikan_base_url},
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read ANISOURCE_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - ANISOURCE_HTTP_TIMEOUT_SECONDS
    - ANISOURCE_PROXY_LIST (or the bare PROXY_LIST), comma separated
    - ANISOURCE_PROVIDERS_DISABLED, comma separated
    - ANISOURCE_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="ANISOURCE_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_retries: Optional[int] = None
    http_initial_delay_ms: Optional[int] = None
    http_backoff_factor: Optional[float] = None
    http_max_jitter_ms: Optional[int] = None

    # Kept as a raw string so pydantic-settings does not try to JSON-decode it.
    proxy_list: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ANISOURCE_PROXY_LIST", "PROXY_LIST"),
    )

    providers_order: Optional[str] = None
    providers_disabled: Optional[str] = None

    jikan_base_url: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        data = self.model_dump(exclude_none=True)
        if "proxy_list" in data:
            data["http_proxies"] = _split_csv(data.pop("proxy_list"))
        providers: dict[str, Any] = {}
        if "providers_order" in data:
            providers["order"] = _split_csv(data.pop("providers_order"))
        if "providers_disabled" in data:
            providers["disabled"] = _split_csv(data.pop("providers_disabled"))
        if providers:
            data["providers"] = providers
        return data
