# gallery/core/config.py
from datetime import timedelta
from functools import lru_cache
from typing import List

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataBaseConfig(BaseModel):
    DB_HOST: str = Field("localhost", description="Database host")
    DB_PORT: int = Field(5432, description="Database port")
    DB_NAME: str = Field("gallery", description="Database name")
    DB_USER: str = Field("gallery", description="Database user")
    DB_PASSWORD: SecretStr = Field(..., description="Database password")  # SecretStr скрывает значение в логах
    DB_ECHO: bool = Field(False, description="Enable SQL echo")
    DB_POOL_SIZE: int = Field(5, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(10, description="Database max overflow")

    @property
    def DATABASE_URL(self) -> str:
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD.get_secret_value()}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    naming_convention: dict[str, str] = {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }


class SecurityConfig(BaseModel):
    TOKEN_SECRET_KEY: SecretStr = Field(..., description="Token signing key")
    TOKEN_EXPIRE_HOURS: int = Field(24, description="Access token lifetime in hours", ge=1)

    @property
    def token_lifetime(self) -> timedelta:
        return timedelta(hours=self.TOKEN_EXPIRE_HOURS)


class MediaConfig(BaseModel):
    MAX_ITEMS_PER_OWNER: int = Field(10, description="Per-owner image quota", ge=1)
    MAX_FILE_SIZE_BYTES: int = Field(10 * 1024 * 1024, description="Upload size ceiling")
    ALLOWED_EXTENSIONS: List[str] = Field(
        default_factory=lambda: [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"],
        description="Accepted file extensions",
    )


class Settings(BaseSettings):
    app_name: str = Field("Gallery API", description="Application name")
    debug: bool = Field(False, description="Debug mode")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:3001",
        ],
        description="CORS origins"
    )

    db: DataBaseConfig
    security: SecurityConfig
    media: MediaConfig = Field(default_factory=MediaConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",  # Для вложенных объектов: DB__DB_HOST, SECURITY__TOKEN_SECRET_KEY
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Кэшированный экземпляр настроек"""
    return Settings()


settings = get_settings()
