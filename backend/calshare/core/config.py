from functools import lru_cache
from typing import List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    PROJECT_NAME: str = "Calendar Sharing API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "local"
    DATABASE_URL: str = "sqlite+aiosqlite:///../calshare.db"
    DB_ECHO: bool = False
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_ALGORITHM: str = "HS256"
    # Union so a comma-separated env value falls through to the validator
    BACKEND_CORS_ORIGINS: Union[List[str], str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Invitation links
    FRONTEND_URL: str = "http://localhost:5173"
    INVITATION_DEFAULT_EXPIRE_DAYS: int = 7
    INVITATION_TOKEN_BYTES: int = 32

    # Rate limiting (anonymous invitation lookups)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    INVITATION_INFO_RATE_LIMIT: str = "30/minute"

    LOG_LEVEL: str = "INFO"

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: List[str] | str) -> List[str]:
        """Allow both comma-separated strings and list inputs."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("INVITATION_TOKEN_BYTES")
    @classmethod
    def check_token_entropy(cls, value: int) -> int:
        # 24 bytes = 192 bits
        if value < 24:
            raise ValueError("INVITATION_TOKEN_BYTES must be at least 24")
        return value

    @field_validator("FRONTEND_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
