"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "PickleBook"
    debug: bool = True
    api_prefix: str = "/api/v1"

    # Storage: "memory", "sql" or "redis"
    storage_backend: str = "sql"
    database_url: str = "sqlite+aiosqlite:///./picklebook.db"
    database_echo: bool = False
    redis_url: str = "redis://redis:6379/0"
    redis_namespace: str = "picklebook:"

    # Mock booking engine
    mock_network_delay_seconds: float = 1.0
    blocked_email_domains: list[str] = ["invalid.com", "mailinator.com", "tempmail.com", "throwaway.email"]

    # Cache
    cache_namespace: str = "cache_"
    games_cache_ttl_seconds: float = 300.0

    # Email / SMTP
    smtp_enabled: bool = False
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_from: str = "noreply@picklebook.app"
    frontend_url: str = "http://localhost:8081"

    model_config = {"env_prefix": "PB_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
