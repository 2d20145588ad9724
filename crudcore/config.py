"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded outside defaults for local dev)
    - get_settings() is cached (lru_cache): one instance per process
    - Token windows default to 1 hour (access) and 7 days (refresh)

Design Decisions:
    - Settings passed explicitly into TokenIssuer and ProviderContext;
      only main.py and api/dependencies.py call get_settings()
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from crudcore.core.domain_types import EmptyUpdatePolicy
from crudcore.core.response_mapping import MASK_SENTINEL


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://crudcore:crudcore@db:5432/crudcore"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Tokens
    jwt_secret_key: str = "change-me-in-production"
    jwt_issuer: str = "autobe"
    access_token_ttl_seconds: int = 60 * 60
    refresh_token_ttl_seconds: int = 60 * 60 * 24 * 7

    # Passwords
    bcrypt_rounds: int = 12

    # Search
    default_page_limit: int = 10
    max_page_limit: int = 100

    # Providers
    empty_update_policy: EmptyUpdatePolicy = EmptyUpdatePolicy.ALLOW
    mask_sentinel: str = MASK_SENTINEL

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
