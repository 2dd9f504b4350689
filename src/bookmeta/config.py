# ABOUTME: Resolver settings with documented defaults, TOML loading, and environment overrides.
# ABOUTME: Settings are passed explicitly into the resolver; there is no global instance.

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

ENV_PREFIX = "BOOKMETA_"
_TRUE_VALUES = ("true", "1", "yes")

# Applied under any partial per-source table, so e.g. setting only the priority
# of open_library keeps its own rate limit.
_SOURCE_DEFAULTS: dict[str, dict[str, Any]] = {
    "google_books": {"priority": 1, "rate_limit_per_minute": 10},
    "open_library": {"priority": 2, "rate_limit_per_minute": 100},
}


class SourceSettings(BaseModel):
    """Per-source switches and limits."""

    enabled: bool = Field(default=True)
    # 1 = highest
    priority: int = Field(default=1, ge=1)
    rate_limit_per_minute: int = Field(default=10, ge=1)
    api_key: str | None = Field(default=None)


class HttpSettings(BaseModel):
    timeout: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1.0, ge=0)


class LoggingSettings(BaseModel):
    level: str = Field(default="WARNING")  # DEBUG, INFO, WARNING, ERROR


class ResolverSettings(BaseModel):
    """Main configuration for bookmeta.

    Loads from an optional TOML file with environment variable overrides.
    """

    cache_ttl_hours: int = Field(default=24, ge=0)
    fuzzy_match_threshold: int = Field(default=85, ge=0, le=100)
    enable_identifier_search: bool = Field(default=True)
    enable_fuzzy_matching: bool = Field(default=True)

    google_books: SourceSettings = Field(
        default_factory=lambda: SourceSettings(**_SOURCE_DEFAULTS["google_books"])
    )
    open_library: SourceSettings = Field(
        default_factory=lambda: SourceSettings(**_SOURCE_DEFAULTS["open_library"])
    )
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("google_books", "open_library", mode="before")
    @classmethod
    def _apply_source_defaults(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, dict):
            return {**_SOURCE_DEFAULTS[info.field_name], **value}
        return value

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_hours * 3600.0

    def source(self, name: str) -> SourceSettings:
        """Settings for a source by its provider name (``google_books``, ``open_library``)."""
        settings = getattr(self, name, None)
        if not isinstance(settings, SourceSettings):
            raise KeyError(f"unknown source: {name}")
        return settings

    @classmethod
    def load(cls, config_path: Path | None = None) -> "ResolverSettings":
        """Load settings from TOML with environment variable overrides.

        Environment variables take precedence and follow the pattern
        BOOKMETA_<KEY> or BOOKMETA_<SECTION>_<KEY>
        (e.g. BOOKMETA_FUZZY_MATCH_THRESHOLD, BOOKMETA_OPEN_LIBRARY_RATE_LIMIT_PER_MINUTE).

        All values are gathered into one dictionary first, then validated by
        pydantic so type coercion is consistent between file and environment.
        """
        config_dict: dict[str, object] = {}
        if config_path and config_path.exists():
            config_dict = tomllib.loads(config_path.read_text())

        config_dict = cls._merge_env_overrides(config_dict)
        return cls.model_validate(config_dict)

    @classmethod
    def _merge_env_overrides(cls, config_dict: dict[str, object]) -> dict[str, object]:
        for key in ("cache_ttl_hours", "fuzzy_match_threshold"):
            if value := os.getenv(f"{ENV_PREFIX}{key.upper()}"):
                config_dict[key] = value
        for key in ("enable_identifier_search", "enable_fuzzy_matching"):
            if value := os.getenv(f"{ENV_PREFIX}{key.upper()}"):
                config_dict[key] = value.lower() in _TRUE_VALUES

        for source in ("google_books", "open_library"):
            section = _section(config_dict, source)
            env = f"{ENV_PREFIX}{source.upper()}_"
            if enabled := os.getenv(f"{env}ENABLED"):
                section["enabled"] = enabled.lower() in _TRUE_VALUES
            if priority := os.getenv(f"{env}PRIORITY"):
                section["priority"] = priority
            if rate := os.getenv(f"{env}RATE_LIMIT_PER_MINUTE"):
                section["rate_limit_per_minute"] = rate
            if api_key := os.getenv(f"{env}API_KEY"):
                section["api_key"] = api_key

        http = _section(config_dict, "http")
        if timeout := os.getenv(f"{ENV_PREFIX}HTTP_TIMEOUT"):
            http["timeout"] = timeout
        if retries := os.getenv(f"{ENV_PREFIX}HTTP_MAX_RETRIES"):
            http["max_retries"] = retries

        logging_config = _section(config_dict, "logging")
        if log_level := os.getenv(f"{ENV_PREFIX}LOGGING_LEVEL"):
            logging_config["level"] = log_level

        return config_dict


def _section(config_dict: dict[str, object], name: str) -> dict[str, object]:
    """Return config_dict[name] as a dict, replacing anything that is not one."""
    section = config_dict.setdefault(name, {})
    if not isinstance(section, dict):
        section = {}
        config_dict[name] = section
    return section
