import os
import re
from urllib.parse import urlparse

from pydantic import AliasChoices, AnyUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_BLOB_TOKEN_ENV = re.compile(r"_READ_WRITE_TOKEN$", re.IGNORECASE)


def _blob_token_from_environment() -> str | None:
    for key, value in os.environ.items():
        if _BLOB_TOKEN_ENV.search(key) and "blob" in key.lower() and value:
            return value
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), extra="ignore")

    environment: str = Field(
        default="production",
        validation_alias=AliasChoices("ENVIRONMENT", "APP_ENV", "NODE_ENV"),
    )

    upstash_redis_rest_url: AnyUrl | None = Field(
        default=None,
        validation_alias=AliasChoices("UPSTASH_REDIS_REST_URL", "KV_REST_API_URL"),
    )
    upstash_redis_rest_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("UPSTASH_REDIS_REST_TOKEN", "KV_REST_API_TOKEN"),
    )
    kv_request_timeout_seconds: float = 10.0
    kv_scan_count: int = 100
    allow_insecure_tls: bool = False

    blob_read_write_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BLOB_READ_WRITE_TOKEN", "BLOB_READ_ONLY_TOKEN"),
    )
    blob_api_url: str = Field(
        default="https://blob.vercel-storage.com",
        validation_alias=AliasChoices("VERCEL_BLOB_API_URL", "BLOB_API_URL"),
    )
    blob_api_version: str = "7"
    blob_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BLOB_BASE_URL", "NEXT_PUBLIC_BLOB_BASE_URL"),
    )
    blob_prefix: str = "web-pics"
    blob_list_page_size: int = 100
    blob_request_timeout_seconds: float = 10.0

    data_cache_path: str | None = None
    read_only_filesystem: bool = False
    data_max_age_seconds: int = 60
    data_stale_while_revalidate_seconds: int = 300

    sentry_dsn: str | None = Field(
        default=None, validation_alias=AliasChoices("SENTRY_DSN", "BACKEND_SENTRY_DSN")
    )
    sentry_traces_sample_rate: float = Field(
        default=0.0,
        validation_alias=AliasChoices(
            "SENTRY_TRACES_SAMPLE_RATE",
            "BACKEND_SENTRY_TRACES_SAMPLE_RATE",
        ),
    )

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() in {"development", "dev", "local"}

    @property
    def kv_verify_tls(self) -> bool:
        # Insecure TLS is only honoured for local development behind intercepting proxies.
        return not (self.is_development and self.allow_insecure_tls)

    @model_validator(mode="after")
    def _populate_blob_token(self):
        if self.blob_read_write_token is None:
            self.blob_read_write_token = _blob_token_from_environment()
        return self

    @field_validator("blob_prefix", mode="before")
    @classmethod
    def _strip_prefix(cls, value):
        if isinstance(value, str):
            cleaned = value.strip().strip("/")
            return cleaned or "web-pics"
        return value

    @field_validator("blob_base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value):
        if value is None:
            return None
        raw = str(value).strip()
        if not raw:
            return None
        parsed = urlparse(raw)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            raise ValueError("BLOB_BASE_URL must be an absolute http(s) URL")
        return raw.rstrip("/")


settings = Settings()
