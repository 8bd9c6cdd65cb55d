"""Runtime configuration for the Micra bridge."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="MICRA_", env_file=".env", extra="ignore")

    app_name: str = "micra-bridge"
    log_level: str = "INFO"
    locale: str = Field(default="en", description="Locale for block names and status texts (en, ja, ja-Hira).")
    helper_mode: bool = Field(default=False, description="Start in helper mode instead of the direct socket mode.")
    host: str = Field(default="localhost", description="Host of the Minecraft server running the Raspberry Jam mod.")
    session_port: int = Field(default=14711, ge=1, le=65535, description="WebSocket port of the mod (direct mode).")
    helper_host: str = Field(default="localhost", description="Host of the helper HTTP server.")
    helper_port: int = Field(default=12345, ge=1, le=65535, description="HTTP port of the helper server.")
    world_port: int = Field(default=4711, ge=1, le=65535, description="Mod port the helper connects to.")
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    retry_max: int = Field(default=10, ge=0, description="Consecutive failed opens tolerated before giving up.")
    reconnect_grace_seconds: float = Field(default=0.5, ge=0)
    position_settle_seconds: float = Field(default=0.5, ge=0)


settings = Settings()
