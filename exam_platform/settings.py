from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Exam Platform"
    env: str = "dev"
    api_prefix: str = "/api/v1"
    cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    storage_backend: str = "inmemory"  # inmemory|mongo
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "exam_platform"

    # Session tokens
    jwt_secret_key: str = "exam-platform-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # National identity card numbers are fixed-length digit strings
    national_id_length: int = 8

    # Observability (OpenTelemetry)
    observability_enabled: bool = False
    otel_service_name: str = "exam-platform"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_console: bool = False
    otel_sample_rate: float = 0.1


settings = Settings()
