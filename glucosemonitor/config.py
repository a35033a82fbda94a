"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Logging
    log_format: str = "json"  # 'json' or 'text'
    log_level: str = "INFO"
    service_name: str = "glucosemonitor-api"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # COB/IOB engine defaults (the settings endpoint can override at runtime)
    cob_carb_absorption_minutes: float = 240.0
    cob_insulin_action_minutes: float = 240.0
    cob_carb_peak_minutes: float = 45.0
    cob_insulin_peak_minutes: float = 75.0
    cob_carb_to_glucose_factor: float = 0.2  # mmol/L per gram (2.0 per 10 g)
    cob_insulin_to_glucose_factor: float = 1.0  # mmol/L per unit (ISF)

    # Dashboard chart: 24 x 15 min = 6 hours ahead
    cob_projection_steps: int = 24
    cob_projection_step_minutes: float = 15.0

    # Testing
    testing: bool = False


settings = Settings()
