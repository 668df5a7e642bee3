"""Application configuration."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "TTB Label Verification API"
    debug: bool = False

    # CORS - Allow all origins for prototype (restrict in production)
    cors_origins: list[str] = ["*"]

    # AI extraction (OpenAI vision model)
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    extraction_max_tokens: int = 500
    extraction_timeout_seconds: float = 60.0

    # Image processing limits
    max_image_size_mb: float = 10.0  # Decoded upload size
    max_image_dimension: int = 2048  # Larger images are shrunk to fit
    resize_jpeg_quality: int = 90  # JPEG quality after a resize
    convert_jpeg_quality: int = 95  # JPEG quality when only converting format

    # Batch processing
    max_batch_size: int = 50
    batch_concurrency: int = 5  # Max extraction calls in flight per batch

    # Demo quota protecting API credits (process lifetime)
    max_total_requests: int = 200

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
