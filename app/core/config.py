from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(env_file=".env", case_sensitive=True)

    DATABASE_URL: str
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Redis configuration for trigger-list caching and run cooldowns
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CACHE_TTL: int = 300  # 5 minutes default for cached trigger lists

    # Automatic temperature transitions
    AUTO_TRANSITIONS_ENABLED: bool = True
    AUTO_TRANSITION_INTERVAL_SECONDS: int = 300
    TRANSITION_RUN_COOLDOWN_SECONDS: int = 30

    # Inbound-message endpoints (match / classify)
    CLASSIFY_RATE_LIMIT: str = "60/minute"

    # CORS configuration: comma-separated origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"


settings = Settings()
