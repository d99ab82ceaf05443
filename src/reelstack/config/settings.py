"""Application settings loaded from environment variables and config files."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reelstack.config import CONFIG_ROOT

DEFAULT_DATA_DIR = Path.home() / ".reelstack"


class PlatformConfig(BaseModel):
    """Static per-platform tag sets used by the deterministic tagging fallback."""

    fallback_tags: Dict[str, List[str]] = Field(default_factory=dict)
    default_tags: List[str] = Field(default_factory=lambda: ["video", "content", "media"], min_length=1)

    model_config = ConfigDict(extra="forbid")

    @field_validator("fallback_tags")
    @classmethod
    def _normalise_keys(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        return {key.lower(): [tag.lower() for tag in tags] for key, tags in value.items() if tags}

    def tags_for(self, platform: str) -> List[str]:
        """Return the static tag set for ``platform`` (case-insensitive)."""

        return list(self.fallback_tags.get(platform.strip().lower(), self.default_tags))


def _load_platform_config(platform_path: Path) -> PlatformConfig:
    if not platform_path.exists():
        return PlatformConfig()

    raw_data = yaml.safe_load(platform_path.read_text(encoding="utf-8")) or {}
    return PlatformConfig(**raw_data)


class Settings(BaseSettings):
    """Primary application settings for ReelStack."""

    openai_api_key: Optional[SecretStr] = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[SecretStr] = Field(default=None, alias="ANTHROPIC_API_KEY")
    tag_model: str = Field(default="gpt-5-nano", alias="REELSTACK_TAG_MODEL")

    data_dir: Path = Field(default=DEFAULT_DATA_DIR, alias="REELSTACK_DATA_DIR")
    storage_key: str = Field(default="reelstack_videos", min_length=1, alias="REELSTACK_STORAGE_KEY")

    youtube_oembed_url: str = Field(
        default="https://www.youtube.com/oembed", alias="REELSTACK_YOUTUBE_OEMBED_URL"
    )
    noembed_url: str = Field(default="https://noembed.com/embed", alias="REELSTACK_NOEMBED_URL")
    placeholder_thumbnail: str = Field(
        default="https://picsum.photos/seed/{seed}/400/225", alias="REELSTACK_PLACEHOLDER_THUMBNAIL"
    )
    http_timeout_seconds: PositiveFloat = Field(default=10.0, alias="REELSTACK_HTTP_TIMEOUT_SECONDS")

    tag_timeout_seconds: PositiveFloat = Field(default=20.0, alias="REELSTACK_TAG_TIMEOUT_SECONDS")
    tag_max_attempts: PositiveInt = Field(default=2, alias="REELSTACK_TAG_MAX_ATTEMPTS")

    saved_at_format: str = Field(default="%x", alias="REELSTACK_SAVED_AT_FORMAT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    platforms: PlatformConfig = Field(default_factory=lambda: _load_platform_config(CONFIG_ROOT / "platforms.yaml"))

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True)

    @property
    def ai_enabled(self) -> bool:
        """Whether any language model credential is configured."""

        return self.openai_api_key is not None or self.anthropic_api_key is not None

    @property
    def console_quiet(self) -> bool:
        return self.log_level.upper() in {"ERROR", "CRITICAL"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()


__all__ = ["PlatformConfig", "Settings", "get_settings"]
