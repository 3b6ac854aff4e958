"""Central environment-driven settings for the gateway process.

Loaded once at startup. Behavior is controlled by environment variables (see
`.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payment-gateway"
    log_level: str = "INFO"
    bank_base_url: str = "http://localhost:8080"
    bank_timeout_seconds: float = 5.0
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
