"""Runtime configuration settings using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from namekit.config.constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_CONVERSION_JPEG_QUALITY,
    DEFAULT_FREE_SPACE_FACTOR,
    DEFAULT_INITIAL_JPEG_QUALITY,
    DEFAULT_JPEG_QUALITY_STEP,
    DEFAULT_LOG_DIR,
    DEFAULT_MAX_IMAGE_BYTES,
    DEFAULT_MIN_JPEG_QUALITY,
    DEFAULT_NAMING_TIMEOUT,
    DEFAULT_PREFERENCES_FILE,
    DEFAULT_TEXT_EXCERPT_CHARS,
)


class NamingConfig(BaseModel):
    """Naming request configuration."""

    timeout: int = Field(default=DEFAULT_NAMING_TIMEOUT, ge=1)
    max_image_bytes: int = Field(default=DEFAULT_MAX_IMAGE_BYTES, ge=1024)
    initial_jpeg_quality: int = Field(default=DEFAULT_INITIAL_JPEG_QUALITY, ge=1, le=100)
    min_jpeg_quality: int = Field(default=DEFAULT_MIN_JPEG_QUALITY, ge=1, le=100)
    jpeg_quality_step: int = Field(default=DEFAULT_JPEG_QUALITY_STEP, ge=1, le=50)
    text_excerpt_chars: int = Field(default=DEFAULT_TEXT_EXCERPT_CHARS, ge=0)


class ConversionConfig(BaseModel):
    """Local conversion configuration."""

    jpeg_quality: int = Field(default=DEFAULT_CONVERSION_JPEG_QUALITY, ge=1, le=100)
    free_space_factor: int = Field(default=DEFAULT_FREE_SPACE_FACTOR, ge=0)


class NamekitSettings(BaseSettings):
    """Main runtime configuration class for namekit.

    The user-editable settings blob (models, keys, prompts, rules) lives in
    the preference store, see ``namekit.config.preferences``.
    """

    model_config = SettingsConfigDict(
        env_prefix="NAMEKIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings sources to include YAML file."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=DEFAULT_CONFIG_FILE),
            file_secret_settings,
        )

    naming: NamingConfig = Field(default_factory=NamingConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: str = DEFAULT_LOG_DIR
    preferences_file: str = DEFAULT_PREFERENCES_FILE

    @property
    def preferences_path(self) -> Path:
        """Preference store path with ``~`` expanded."""
        return Path(self.preferences_file).expanduser()


@lru_cache
def get_settings() -> NamekitSettings:
    """Get cached settings instance."""
    return NamekitSettings()


def reload_settings() -> NamekitSettings:
    """Force reload settings (clear cache)."""
    get_settings.cache_clear()
    return get_settings()
