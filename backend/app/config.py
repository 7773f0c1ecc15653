"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - cache_max_orders >= MIN_CACHE_ENTRIES, rejected at load time otherwise

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Values are injected into services at construction; nothing reads settings lazily
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from app.core.domain_types import MIN_CACHE_ENTRIES


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://orders:orders@db:5432/orders"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Cache (Redis)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    cache_max_orders: int = 100
    cache_key_prefix: str = "order:"
    cache_ttl_seconds: int = 3600
    cache_preload_ttl_seconds: int = 86_400

    @field_validator("cache_max_orders")
    @classmethod
    def check_cache_bound(cls, v: int) -> int:
        if v < MIN_CACHE_ENTRIES:
            raise ValueError(
                f"cache_max_orders must be at least {MIN_CACHE_ENTRIES}",
            )
        return v

    # Feed (Kafka)
    kafka_enabled: bool = True
    kafka_bootstrap_servers: str = "localhost:9092"
    kafka_topic: str = "orders"
    kafka_group_id: str = "orders-consumer"
    kafka_retry_backoff_seconds: float = 5.0

    # Reconciliation
    # ADR: validate the snapshot about to be written (incoming on create,
    # merged on update) so partial feed updates stay legal
    reconcile_validate_on_write: bool = True
    reconcile_retry_conflicts: bool = True

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
