"""
Configuration Management Module

Configures gateway parameters via environment variables or .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "Claude2OpenAI"
    DEBUG: bool = False

    # Server Config
    HOST: str = "0.0.0.0"
    PORT: int = 6600

    # Upstream Config
    # Base URL of the Anthropic compatible service, without the /v1 suffix
    UPSTREAM_BASE_URL: str = "https://api.anthropic.com"
    # Comma-separated list of accepted models; the first one is the default
    ALLOWED_MODELS: str = (
        "claude-3-haiku-20240307,"
        "claude-3-sonnet-20240229,"
        "claude-3-opus-20240229,"
        "claude-3-5-sonnet-20240620"
    )

    # HTTP Client Config
    # Request timeout (seconds)
    HTTP_TIMEOUT: int = 1800

    # CORS Config
    # Comma-separated list of allowed origins, "*" allows any origin
    ALLOWED_ORIGINS: str = "*"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
