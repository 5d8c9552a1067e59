"""Configuration management for the Pattern Builder Service."""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class InferenceThresholds:
    """Fixed cut-offs and weights used by token type inference."""

    extension: float = 0.5
    camera_side: float = 0.3
    date: float = 0.5
    index: float = 0.4

    # Group ID candidates: unique enough and not looking like anything else
    group_id_uniqueness: float = 0.7
    group_id_exclusion: float = 0.3
    group_id_weight: float = 0.8

    # Prefix/suffix candidates: mostly constant values
    fixed_uniqueness: float = 0.3
    prefix_weight: float = 0.7
    suffix_weight: float = 0.6

    max_examples: int = 3
    manual_override_confidence: float = 0.9


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PATTERN_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging settings
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Render structured logs as JSON")

    # Cache settings
    cache_max_tokens: int = Field(default=10_000, gt=0, description="Maximum cached tokenized filenames")
    cache_max_analyses: int = Field(default=100, gt=0, description="Maximum cached sample-set analyses")
    cache_max_memory_mb: int = Field(default=50, gt=0, description="Estimated memory ceiling for the cache in MB")

    # Background processing settings
    max_files_for_analysis: int = Field(default=500, gt=0, description="Maximum filenames analyzed per sample set")
    validation_debounce_ms: int = Field(default=300, ge=0, description="Quiescence window before validation runs")

    # Pattern generation settings
    flexible_extensions: bool = Field(
        default=False, description="Accept any supported image extension in generated patterns"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
