"""Application settings and configuration management."""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings with environment variable support."""

    # Search Configuration
    fuzzy_threshold: int = Field(default=75, ge=0, le=100)
    max_results: int = Field(default=1000, ge=1)
    tier1_short_circuit: int = Field(default=10, ge=1)
    search_tiers: int = Field(default=2, ge=1, le=2)
    levenshtein_exact_limit: int = Field(default=100, ge=0)

    # Cache Configuration
    cache_max_entries: Optional[int] = Field(default=10000, ge=1)

    # Suggestions
    suggestion_min_length: int = Field(default=2, ge=1)
    max_suggestions: int = Field(default=5, ge=1)

    # Field aliases, tried in order when reading a source row
    code_aliases: List[str] = Field(
        default=["Mã Hiệu", "Mã hiệu", "ma_hieu", "MA_HIEU", "code"]
    )
    description_aliases: List[str] = Field(
        default=["Tên Công Việc", "Tên công việc", "ten_cong_viec", "TEN_CONG_VIEC", "description"]
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    model_config = SettingsConfigDict(
        env_prefix="NORM_LOOKUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
