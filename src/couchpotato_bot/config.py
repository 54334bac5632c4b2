"""CouchPotato Bot — configuration loaded from environment."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Telegram Bot API ──────────────────────────────────
    telegram_bot_token: str = ""
    telegram_api_base_url: str = "https://api.telegram.org"
    telegram_webhook_secret: str = ""
    polling_timeout_seconds: int = 30

    # ── Access control ────────────────────────────────────
    bot_password: str = ""
    bot_owner: int | None = None
    acl_file: Path = Path("acl.json")

    # ── CouchPotato API ───────────────────────────────────
    couchpotato_hostname: str = "localhost"
    couchpotato_port: int = 5050
    couchpotato_api_key: str = ""
    couchpotato_url_base: str = ""
    couchpotato_ssl: bool = False
    couchpotato_username: str = ""
    couchpotato_password: str = ""
    enable_mock_catalog: bool = False

    # ── Conversation sessions ─────────────────────────────
    session_ttl_seconds: int = 120
    session_check_period_seconds: int = 150

    # ── App ───────────────────────────────────────────────
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    app_name: str = "CouchPotato Bot"
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def couchpotato_base_url(self) -> str:
        scheme = "https" if self.couchpotato_ssl else "http"
        url_base = self.couchpotato_url_base.strip("/")
        prefix = f"/{url_base}" if url_base else ""
        return (
            f"{scheme}://{self.couchpotato_hostname}:{self.couchpotato_port}"
            f"{prefix}/api/{self.couchpotato_api_key}"
        )


# Singleton settings instance
settings = Settings()
