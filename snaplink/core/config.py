"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Snaplink"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Public domains (comma-separated); the first one is used for short URLs
    public_domains: str = ""

    # Pre-built frontend served for unknown paths (empty = API only)
    frontend_dir: str = ""

    # Security
    cors_origins: list[str] = ["http://localhost:5173"]

    # Rate limiting
    rate_limit_enabled: bool = True

    # Observability
    log_json: bool = True
    sentry_dsn: str = ""
    otlp_endpoint: str = ""

    @property
    def public_domain(self) -> str | None:
        """First configured public domain, if any."""
        domains = [d.strip() for d in self.public_domains.split(",") if d.strip()]
        return domains[0] if domains else None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
