from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    """Application settings"""
    # API Keys
    claude_api_key: str | None = None
    doctor_model: str = "anthropic:claude-sonnet-4-5-20250929"

    database_url: str = "postgresql+asyncpg://localhost/skininsight"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = '.env'


@lru_cache
def get_settings() -> Settings:
    return Settings()
