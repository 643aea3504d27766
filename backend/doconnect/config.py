"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded outside dev placeholders)
    - get_settings() is cached (lru_cache): single instance per process
    - jwt_expires_minutes >= 1 and orphan_grace_minutes >= 0 are checked at load time
    - Key length is NOT checked here; TokenService raises ConfigurationError at issuance

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - JwtSettings is a plain frozen dataclass so services and tests build it without env
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class JwtSettings:
    """Signing configuration consumed by TokenService."""
    key: str
    issuer: str
    audience: str
    expires_minutes: int = 60


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://doconnect:doconnect@db:5432/doconnect"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres URLs come as postgresql://; asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # JWT
    jwt_key: str = "dev-only-placeholder-signing-key-change-me"
    jwt_issuer: str = "DoConnect"
    jwt_audience: str = "DoConnect"
    jwt_expires_minutes: int = Field(default=60, ge=1)

    # Image storage (web-servable root; images live under <storage_root>/uploads)
    storage_root: str = "wwwroot"
    orphan_grace_minutes: int = Field(default=60, ge=0)

    # API
    cors_origins: list[str] = ["http://localhost:4200"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def jwt_settings(self) -> JwtSettings:
        return JwtSettings(
            key=self.jwt_key,
            issuer=self.jwt_issuer,
            audience=self.jwt_audience,
            expires_minutes=self.jwt_expires_minutes,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
