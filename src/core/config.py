"""
CrimeWatch Triage - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Classification backend: "zero_shot" (hosted inference) or "local"
    classifier_backend: str = "zero_shot"
    zero_shot_api_url: str = "https://api-inference.huggingface.co/models"
    zero_shot_model: str = "facebook/bart-large-mnli"
    hf_api_token: Optional[str] = None
    local_analysis_url: str = "http://localhost:5000/analyze"

    # Triage
    classifier_timeout_seconds: float = 30.0
    classifier_retries: int = 0

    # Firebase (realtime database + identity)
    firebase_database_url: Optional[str] = None
    firebase_auth_token: Optional[str] = None
    firebase_api_key: Optional[str] = None

    # Cloudinary (media upload)
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_upload_preset: str = "crime_reports"

    # Nominatim (geocoding)
    nominatim_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "CrimeWatch-Triage/1.0"

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def zero_shot_endpoint(self) -> str:
        return f"{self.zero_shot_api_url.rstrip('/')}/{self.zero_shot_model}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
