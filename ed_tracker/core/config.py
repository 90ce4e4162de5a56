from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    APP_NAME: str = "ed-tracker"
    ENV: Literal["local", "dev", "prod"] = "local"
    API_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: list[str] = ["*"]  # displays and phones connect from anywhere

    # Patient records
    DISPLAY_TIME_FORMAT: str = "%H:%M"
    SEED_DEMO_DATA: bool = False

    # Waiting-room displays
    DISPLAY_PAGE_SIZE: int = 3
    DISPLAY_ROTATION_SECONDS: float = 8.0

    # Realtime fan-out
    SESSION_QUEUE_MAXSIZE: int = 256

    @field_validator("DISPLAY_PAGE_SIZE")
    @classmethod
    def _must_be_positive(cls, v: int):
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("DISPLAY_ROTATION_SECONDS")
    @classmethod
    def _must_be_a_real_interval(cls, v: float):
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("SESSION_QUEUE_MAXSIZE")
    @classmethod
    def _must_hold_connect_messages(cls, v: int):
        # a new session is handed init_data and update_alert_mode at once
        if v < 2:
            raise ValueError("must be >= 2")
        return v

settings = Settings()
