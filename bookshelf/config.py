"""
Application configuration — loads from .env (dev) or the process environment.
No secrets are ever hardcoded.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── Environment ──
    environment: str = "development"

    # ── AWS ──
    aws_region: str = "us-east-1"
    aws_endpoint_url: Optional[str] = None  # LocalStack: http://localstack:4566

    # ── DynamoDB ──
    books_table_name: str = "Books"

    # ── Cover images (S3) ──
    covers_bucket: str = "bookshelf-covers"
    covers_folder: str = "book-covers"
    covers_public_base_url: Optional[str] = None
    cover_max_bytes: int = 5 * 1024 * 1024

    # ── Redis ──
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_password: str = "changeme"
    redis_url: Optional[str] = None

    # ── List cache ──
    cache_enabled: bool = True
    books_cache_ttl_seconds: int = 300

    # ── Monitoring ──
    log_level: str = "INFO"
    log_format: str = "json"

    # ── CORS ──
    cors_origins: str = "http://localhost:3000,http://localhost:8080"

    # ── Catalog client (explorer side) ──
    catalog_api_url: str = "http://localhost:8000"
    http_timeout_seconds: float = 10.0
    http_connect_timeout_seconds: float = 5.0
    http_retry_attempts: int = 3
    http_retry_min_wait: float = 1.0
    http_retry_max_wait: float = 5.0
    circuit_failure_threshold: int = 5
    circuit_recovery_timeout: int = 30

    # ── Explorer ──
    search_debounce_ms: int = 300

    @property
    def redis_dsn(self) -> str:
        if self.redis_url:
            return self.redis_url
        return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/0"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def covers_base_url(self) -> str:
        if self.covers_public_base_url:
            return self.covers_public_base_url.rstrip("/")
        return f"https://{self.covers_bucket}.s3.{self.aws_region}.amazonaws.com"

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
