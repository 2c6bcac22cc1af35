"""Configuration management for the EZSOP service."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")
    SUPABASE_ANON_KEY: str = Field(default="", description="Supabase anon key for auth calls")

    # Anthropic configuration
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key for the AI proxy")

    # Environment
    EZSOP_ENV: str = Field(default="dev", description="Environment: dev, staging, prod, test")
    LOG_LEVEL: str | None = Field(
        default=None,
        description="Minimum log level (DEBUG, INFO, WARNING, ERROR, FATAL). "
        "Defaults to DEBUG in dev, INFO otherwise",
    )

    # AI proxy configuration
    AI_MODEL: str = Field(
        default="claude-sonnet-4-20250514", description="Model used for every AI proxy action"
    )
    AI_MAX_TOKENS: int = Field(default=2048, description="Completion budget per AI call")
    AI_PROXY_URL: str | None = Field(
        default=None,
        description="Remote AI proxy endpoint. When unset, actions are dispatched in-process",
    )
    AI_PROXY_TIMEOUT_SECONDS: float = Field(
        default=120.0, description="Timeout for the remote AI proxy transport"
    )

    # CORS
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Comma-separated origins allowed to call the API",
    )

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
