"""Service settings for the fare engine API and dashboard."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fare_engine.config.policy import PolicyConfig


class APISettings(BaseSettings):
    """HTTP API configuration."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = False

    model_config = SettingsConfigDict(env_prefix="FARE_ENGINE_API_", extra="ignore")


class EngineSettings(BaseSettings):
    """Overrides for the default engine policy."""

    processor_fee_percent: float = Field(
        default=2.0, ge=0, le=100,
        description="Payment-gateway cost as % of commission",
    )
    utc_offset_minutes: int = Field(
        default=330, ge=-720, le=840,
        description="Local offset for day boundaries",
    )

    model_config = SettingsConfigDict(env_prefix="FARE_ENGINE_", extra="ignore")


class Settings(BaseSettings):
    """Root settings container."""

    api: APISettings = Field(default_factory=APISettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)

    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON-line logs")

    model_config = SettingsConfigDict(
        env_prefix="FARE_ENGINE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    def default_policy(self) -> PolicyConfig:
        """Engine policy seeded from these settings."""
        return PolicyConfig(
            processor_fee_percent=self.engine.processor_fee_percent,
            utc_offset_minutes=self.engine.utc_offset_minutes,
        )


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
