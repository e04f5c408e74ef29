"""Application configuration loaded from environment variables.

Configuration Priority (highest to lowest):
1. System environment variables (export VAR=value)
2. .env file
3. Default values in config.py (lowest)

Every key has a usable default, so the service starts without any
configuration. Without POLYGON_API_KEY the quote source runs on its
fallback price table.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Polygon market data (previous-session close)
    polygon_api_key: str = ""  # Empty means no credentials: fallback prices only
    polygon_base_url: str = "https://api.polygon.io"
    quote_timeout_seconds: float = 10.0

    # Pricing
    risk_free_rate: float = 0.05

    # Scan defaults (used when the request omits them)
    default_min_dte: int = 30
    default_max_dte: int = 45
    default_max_strategies: int = 5

    # Timezone used to resolve "today" for the expiration calendar
    timezone: str = "US/Eastern"

    # Application Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Comma-separated list of allowed origins (e.g., "https://app.example.com,https://www.example.com")
    allowed_origins: str = ""

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def cors_origins(self) -> list[str]:
        """Parsed ALLOWED_ORIGINS; wildcard in debug mode when nothing is set."""
        origins = [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        if not origins and self.debug:
            return ["*"]
        return origins


# Global settings instance
settings = Settings()
