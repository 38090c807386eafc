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

from invidiarr.infrastructure.invidious.constants import (
    DEFAULT_CIPHER_PARAM,
    DEFAULT_PLAYER_BASE_URL,
    DEFAULT_USER_AGENT,
    DEFAULT_WATCH_URL,
)

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class CipherConfig(BaseModel):
    """Where the player script is found and which parameter it decodes."""

    watch_url: str = Field(
        default=DEFAULT_WATCH_URL,
        description="Watch page used to discover the current player script.",
    )
    player_base_url: str = Field(
        default=DEFAULT_PLAYER_BASE_URL,
        description="Base URL for relative player script references.",
    )
    param: str = Field(
        default=DEFAULT_CIPHER_PARAM,
        description="Query parameter on media URLs that must be decoded.",
    )


class StreamConfig(BaseModel):
    """Stream selection and validation settings."""

    probe_timeout_seconds: float = Field(
        default=5.0,
        description="Per-candidate reachability probe timeout in seconds.",
    )
    allow_unvalidated_fallback: bool = Field(
        default=True,
        description=(
            "Return the best adaptive audio URL even when no candidate "
            "passed the reachability probe."
        ),
    )
    related_limit: int = Field(
        default=10,
        description="Max related songs returned per video.",
    )

    @field_validator("probe_timeout_seconds")
    @classmethod
    def _validate_probe_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("probe_timeout_seconds must be > 0")
        return v

    @field_validator("related_limit")
    @classmethod
    def _validate_related_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError("related_limit must be >= 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (invidious/http/logging/cipher/streams).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < overrides) in load.py.
    """

    # General
    app_name: str = Field(default="invidiarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Mirror API (YAML section: invidious.*)
    invidious_instance: str = Field(
        default="yewtu.be",
        validation_alias=AliasChoices(
            "invidious_instance",
            AliasPath("invidious", "instance"),
        ),
        description="Invidious instance host or URL (scheme defaults to https).",
    )
    invidious_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "invidious_timeout_seconds",
            AliasPath("invidious", "timeout_seconds"),
        ),
        description="Timeout for metadata, watch page and player script fetches.",
    )

    # HTTP (YAML section: http.*)
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
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

    cipher: CipherConfig = Field(default_factory=CipherConfig)
    streams: StreamConfig = Field(default_factory=StreamConfig)

    @field_validator("invidious_instance")
    @classmethod
    def _validate_instance(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("invidious_instance must not be empty")
        return v.strip()

    @field_validator("invidious_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("invidious_timeout_seconds must be > 0")
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
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "invidious": {
                "instance": self.invidious_instance,
                "timeout_seconds": self.invidious_timeout_seconds,
            },
            "http": {"user_agent": self.http_user_agent},
            "logging": {"level": self.log_level, "format": self.log_format},
            "cipher": self.cipher.model_dump(),
            "streams": self.streams.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Supported env var examples (flat, explicit):
    - INVIDIARR_INVIDIOUS_INSTANCE
    - INVIDIARR_INVIDIOUS_TIMEOUT_SECONDS
    - INVIDIARR_LOG_LEVEL
    - INVIDIARR_CIPHER_PLAYER_BASE_URL
    - INVIDIARR_CIPHER_PARAM
    - INVIDIARR_STREAMS_ALLOW_UNVALIDATED_FALLBACK
    """

    model_config = SettingsConfigDict(
        env_prefix="INVIDIARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    invidious_instance: Optional[str] = None
    invidious_timeout_seconds: Optional[float] = None

    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cipher_watch_url: Optional[str] = None
    cipher_player_base_url: Optional[str] = None
    cipher_param: Optional[str] = None

    streams_probe_timeout_seconds: Optional[float] = None
    streams_allow_unvalidated_fallback: Optional[bool] = None
    streams_related_limit: Optional[int] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
