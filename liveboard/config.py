from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from liveboard.room.state import DEFAULT_TOKEN_BYTES, MIN_TOKEN_BYTES

DEFAULT_ADMIN_PASSWORD = "1234"
DEFAULT_STATIC_DIR = str(Path(__file__).resolve().parent / "static")


class Settings(BaseSettings):
    """App settings loaded from env/.env (pydantic v2 style)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    admin_password: str = DEFAULT_ADMIN_PASSWORD
    host: str = "0.0.0.0"
    port: int = 3000

    # 6 hours without an admin action wipes the board and rotates the URL.
    idle_timeout_sec: float = 6 * 60 * 60
    room_token_bytes: int = Field(default=DEFAULT_TOKEN_BYTES, ge=MIN_TOKEN_BYTES)
    rotate_clears_messages: bool = False
    max_message_length: int = 20000

    heartbeat_interval_sec: float = 25
    heartbeat_timeout_sec: float = 60
    send_timeout_sec: float = 5
    outbox_limit: int = 1000

    static_dir: str = DEFAULT_STATIC_DIR
    allowed_origins: str = "*"

    log_level: str = "INFO"
    log_file: str = "liveboard.log"

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


def load_settings() -> Settings:
    """Read settings fresh from the environment (tests monkeypatch env between apps)."""
    return Settings()
