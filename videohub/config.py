"""
Application configuration using environment variables.
"""
import os
import secrets
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "VideoHub API"
    debug: bool = False
    environment: str = "development"

    # Security
    secret_key: str = os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60  # 1 hour
    refresh_token_expire_days: int = 7
    oauth_state_expire_minutes: int = 10

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./videohub.db")
    db_connect_timeout: int = 10  # seconds

    # CORS
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://localhost:3000",
    ]

    # Google sign-in
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None

    # YouTube channel authorization / publishing
    youtube_client_id: Optional[str] = None
    youtube_client_secret: Optional[str] = None
    youtube_redirect_uri: str = "http://localhost:8000/api/youtube/callback"
    youtube_privacy_status: str = "public"  # private, unlisted, public
    youtube_category_id: str = "22"  # People & Blogs

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Validate secret key on startup
settings = get_settings()
if settings.environment == "production" and "SECRET_KEY" not in os.environ:
    raise ValueError(
        "SECRET_KEY must be set in production! "
        "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
