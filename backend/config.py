"""Application settings loaded from .env file."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    DB_URL: str = "postgresql+psycopg2://localhost/postgres"
    DB_SCHEMA: Optional[str] = None   # None = dialect default ("public" on PostgreSQL)

    # Deadlines
    QUERY_TIMEOUT_SECONDS: float = 8
    SCHEMA_TIMEOUT_SECONDS: float = 30
    LLM_TIMEOUT_SECONDS: float = 60

    # LLM provider
    LLM_PROVIDER: str = "openai"      # openai | anthropic | ollama
    LLM_API_KEY: str = ""
    LLM_MODEL: str = ""
    LLM_BASE_URL: str = ""
    LLM_MAX_TOKENS: int = 1024

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    CORS_ORIGINS: str = "http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
