from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "MedAIEval"
    env: str = "dev"
    cors_origins: str = "*"
    log_level: str = "INFO"

    # Priority order of AI providers; first success wins.
    ai_provider_order: str = "mistral,openai"
    ai_call_timeout_seconds: float = 90.0

    # Provider credentials are optional: a missing key only disables that adapter.
    mistral_api_key: str | None = None
    mistral_base_url: str = "https://api.mistral.ai"
    mistral_model: str = "mistral-large-latest"
    mistral_temperature: float = 0.7

    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o"

    deepseek_api_key: str | None = None
    deepseek_base_url: str = "https://api.deepseek.com"
    deepseek_model: str = "deepseek-chat"

    storage_backend: str = "inmemory"  # inmemory|mongo
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "medaieval"

    # No authentication yet; every request acts as this user.
    mock_user_id: int = 1

    # Observability (OpenTelemetry)
    observability_enabled: bool = False
    otel_service_name: str = "medaieval"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_console: bool = False
    otel_sample_rate: float = 0.1

    def provider_order(self) -> list[str]:
        return [p.strip().lower() for p in self.ai_provider_order.split(",") if p.strip()]


settings = Settings()
