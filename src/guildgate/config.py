from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present as early as possible
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore any other env vars we don't model explicitly
    )

    # Frontend that renders the verification result pages
    frontend_url: Optional[str] = None  # `FRONTEND_URL`

    # OAuth application
    discord_client_id: Optional[str] = None
    discord_client_secret: Optional[str] = None
    discord_redirect_uri: Optional[str] = None

    # Guild every verified user must belong to
    discord_guild_id: Optional[str] = None

    # Web server
    host: str = "0.0.0.0"  # `HOST`
    port: int = 8000  # `PORT`
    log_level: str = "info"  # `LOG_LEVEL`

    @property
    def login_configured(self) -> bool:
        return bool(self.discord_client_id and self.discord_redirect_uri)

    @property
    def callback_configured(self) -> bool:
        return all(
            (
                self.frontend_url,
                self.discord_client_id,
                self.discord_client_secret,
                self.discord_redirect_uri,
                self.discord_guild_id,
            )
        )

    @property
    def frontend_base_url(self) -> str:
        """``FRONTEND_URL`` without a trailing slash."""
        return (self.frontend_url or "").rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance to avoid re-parsing env vars."""

    return Settings()
