from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration read from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = Field(default="lingoticket")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s %(levelname)s %(name)s %(message)s")

    # Persistence; unset keeps tickets in process memory
    database_url: str | None = Field(default=None)

    # Translation provider
    deepl_base_url: str = Field(default="https://api-free.deepl.com/v2")
    deepl_api_key: str = Field(default="")
    deepl_timeout_ms: int = Field(default=8000, gt=0)
    deepl_auth_scheme: str = Field(default="DeepL-Auth-Key")

    # Observability configuration
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="lingoticket")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_exporter_otlp_headers: str | None = Field(default=None)


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()
