"""Configuration settings for the application."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    API_PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]  # browser front-ends allowed to call the API

    # Model gateway
    GATEWAY: str = "anthropic"
    ANTHROPIC_API_KEY: str | None = None
    ANTHROPIC_MODEL: str = "claude-sonnet-4-20250514"
    MAX_TOKENS: int = 4096
    GATEWAY_TIMEOUT: float = 120.0  # seconds per model call
    GATEWAY_MAX_RETRIES: int = 0  # transport retries inside the SDK client only

    # Agent loop
    MAX_ITERATIONS: int = 25  # model calls per conversation before giving up
    TOOL_TIMEOUT: float = 30.0  # seconds per async tool call
    PARALLEL_TOOL_CALLS: bool = False

    class Config:
        """Configuration for Pydantic settings."""

        # Load environment variables from a .env file
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
