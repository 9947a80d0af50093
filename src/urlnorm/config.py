"""
Configuration management for urlnorm.

Rule lists can be overridden from the environment as JSON arrays, e.g.
``URLNORM_IGNORED_QUERY_PARAMS='["utm_.*", "ref"]'``.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from urlnorm.normalization.options import (
    DEFAULT_EXTENSION_SUFFIX,
    DEFAULT_HOST_PREFIX,
    DEFAULT_IGNORED_QUERY_PARAMS,
    DEFAULT_PATH_EXTENSION_LENGTH,
    Options,
)


class NormalizerConfig(BaseSettings):
    """Configuration for the URL normalizer."""

    ignored_query_params: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_QUERY_PARAMS),
        description="Query keys (whole-key regex) dropped from comparison",
    )
    trimmed_host_prefixes: list[str] = Field(
        default_factory=lambda: [DEFAULT_HOST_PREFIX],
        description="Host prefix patterns stripped repeatedly",
    )
    trimmed_path_extension_suffixes: list[str] = Field(
        default_factory=lambda: [DEFAULT_EXTENSION_SUFFIX],
        description="Extension patterns trimmed from the last path segment",
    )
    path_extension_length: int = Field(
        default=DEFAULT_PATH_EXTENSION_LENGTH,
        ge=0,
        description="Maximum length of a trimmed extension",
    )

    # Global settings
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix="URLNORM_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    def to_options(self) -> Options:
        """Convert to a normalization rule set."""
        return (
            Options()
            .with_ignored_query_params(self.ignored_query_params)
            .with_trimmed_host_prefixes(self.trimmed_host_prefixes)
            .with_trimmed_path_extension_suffixes(self.trimmed_path_extension_suffixes)
            .with_path_extension_length(self.path_extension_length)
        )


# Global config instance
_config: Optional[NormalizerConfig] = None


def get_config() -> NormalizerConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = NormalizerConfig()
    return _config


def reset_config() -> None:
    """Reset the global configuration (mainly for testing)."""
    global _config
    _config = None
