from functools import lru_cache
from typing import List

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatcherThresholds(BaseModel):
    fuzzy_match_threshold: int = 80  # 0-100 similarity score
    abv_tolerance_percent: float = 0.5  # +/- 0.5 percentage points ABV
    category_confidence_floor: int = 70
    min_missing_for_abort: int = 2
    token_confidence_floor: float = 0.35
    min_token_length: int = 2


class Settings(BaseSettings):
    """Runtime configuration for the label verifier service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="LABEL_VERIFIER_", extra="ignore"
    )

    project_name: str = "Alcohol Label Verifier API"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    ocr_languages: List[str] = ["en"]
    use_gpu: bool = False
    ocr_fallback_enabled: bool = True
    max_images: int = 2
    max_upload_bytes: int = 10 * 1024 * 1024
    max_image_side: int = 1024
    allowed_content_types: List[str] = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
    ]
    verify_rate_limit: str = "10/minute"
    matcher_thresholds: MatcherThresholds = MatcherThresholds()


@lru_cache
def get_settings() -> Settings:
    return Settings()
