from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import ClassVar

class Settings(BaseSettings):
    PROJECT_NAME: str = "BookKeep API"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./bookkeep.db"
    # Create missing tables on startup (migrations remain the source of truth)
    AUTO_CREATE_SCHEMA: bool = True

    CORS_ORIGINS: list[str] = ["http://localhost:8000", "http://127.0.0.1:8000"]

    COVER_LOOKUP_ENABLED: bool = True
    COVER_LOOKUP_BASE_URL: str = "https://covers.openlibrary.org"
    COVER_LOOKUP_TIMEOUT: float = 5.0

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
    )

@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
