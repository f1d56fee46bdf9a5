"""Application settings powered by Pydantic BaseSettings."""

from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheBackend(str, Enum):
    """Available cache storage backends."""

    DISK = "disk"
    SQLITE = "sqlite"
    REDIS = "redis"
    S3 = "s3"


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    site_name: str = Field(default="unveil", validation_alias="SITE_NAME")
    site_url: str = Field(default="http://localhost:8080", validation_alias="SITE_URL")
    language: str = Field(default="en", validation_alias="LANGUAGE")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    dns_servers: str = Field(default="1.1.1.1, 8.8.8.8", validation_alias="DNS_SERVERS")
    proxy_url: str | None = Field(default=None, validation_alias="PROXY_URL")
    verify_tls: bool = Field(default=True, validation_alias="VERIFY_TLS")
    selenium_host: str = Field(default="localhost:4444", validation_alias="SELENIUM_HOST")
    rules_dir: Path | None = Field(default=None, validation_alias="RULES_DIR")

    cache_backend: CacheBackend = Field(
        default=CacheBackend.SQLITE, validation_alias="CACHE_BACKEND"
    )
    cache_dir: Path = Field(default=Path("cache"), validation_alias="CACHE_DIR")
    disable_cache: bool = Field(default=False, validation_alias="DISABLE_CACHE")

    redis_host: str = Field(default="localhost", validation_alias="REDIS_HOST")
    redis_port: int = Field(default=6379, validation_alias="REDIS_PORT")
    redis_prefix: str = Field(default="unveil:", validation_alias="REDIS_PREFIX")

    s3_access_key: str | None = Field(default=None, validation_alias="S3_ACCESS_KEY")
    s3_secret_key: str | None = Field(default=None, validation_alias="S3_SECRET_KEY")
    s3_bucket: str | None = Field(default=None, validation_alias="S3_BUCKET")
    s3_region: str = Field(default="us-east-1", validation_alias="S3_REGION")
    s3_folder: str = Field(default="cache/", validation_alias="S3_FOLDER")
    s3_acl: str = Field(default="private", validation_alias="S3_ACL")
    s3_endpoint: str | None = Field(default=None, validation_alias="S3_ENDPOINT")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level name."""
        return v.strip().upper()

    @property
    def dns_server_list(self) -> list[str]:
        """Configured DNS servers as a list."""
        return [server.strip() for server in self.dns_servers.split(",") if server.strip()]

    @property
    def debug_enabled(self) -> bool:
        """Whether the diagnostics panel should be rendered."""
        return self.debug or self.log_level == "DEBUG"


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
