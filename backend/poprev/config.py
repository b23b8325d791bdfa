"""
Application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from typing import List, Optional


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "Popular Revelation"
    environment: str = "development"  # development, production
    log_level: str = "INFO"

    # Storage
    database_url: str = "sqlite:///./poprev.db"
    storage_backend: str = "sql"  # sql, memory

    # Auth
    jwt_secret: str = "dev-only-secret-change-me-before-deploying"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = 10

    # Query limits
    default_page_size: int = 10
    max_page_size: int = 100
    search_result_limit: int = 20

    # PDF export (not implemented, URL placeholder only)
    pdf_base_path: str = "/pdfs"

    # Seed admin account
    seed_admin_name: str = "Administrator"
    seed_admin_email: Optional[str] = None
    seed_admin_password: Optional[str] = None

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: List[str] = ["http://localhost:5173"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
