"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "DoubtDesk"
    app_version: str = "1.0.0"
    debug: bool = True

    # Security
    secret_key: str = "your-secret-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Storage
    storage_type: str = "local"
    local_storage_path: str = "./data"

    # LLM Provider settings
    llm_provider: str = "gemini"  # "gemini" or "openai"
    llm_api_key: Optional[str] = None
    llm_models: list[str] = []  # fallback order; uses provider default if empty
    llm_base_url: Optional[str] = None  # uses provider default if not set
    llm_timeout: float = 60.0

    # Legacy keys (still accepted)
    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None

    # Doubts
    doubt_daily_limit: int = 50
    lecture_catalog_path: Optional[str] = None  # JSON catalog; built-in catalog if not set
    answer_service_url: str = "http://localhost:8000"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/doubtdesk.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
