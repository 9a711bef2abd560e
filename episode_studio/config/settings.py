"""
Configuration management for Episode Studio

Loads environment variables and provides application settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Episode Studio"
    port: int = 3000
    log_level: str = "INFO"

    # Bearer key protecting /api/* routes
    # Leave unset in development to disable the check entirely
    bearer_key: Optional[str] = None

    # =========================================================================
    # Episode Generation
    # =========================================================================
    # Language the episode generator is told to write in
    output_language: str = "Japanese"

    # Previous episode text longer than this is summarized before composing
    # the prompt. Set to 0 to always summarize.
    previous_episode_summary_threshold: int = 2000

    # Path to per-agent model routing (None = bundled config/models.yaml)
    models_config_path: Optional[str] = None

    # =========================================================================
    # Push Message Delivery (LINE Messaging API)
    # =========================================================================
    line_channel_access_token: Optional[str] = None
    line_push_endpoint: str = "https://api.line.me/v2/bot/message/push"
    # Fixed deep link opened from the push card
    episode_deep_link_url: str = "https://example.com/episodes/latest"

    # =========================================================================
    # Email Delivery (Resend-compatible HTTP API)
    # =========================================================================
    email_api_key: Optional[str] = None
    email_endpoint: str = "https://api.resend.com/emails"
    email_from_address: str = "Episode Studio <episodes@example.com>"

    # Transport request timeout (seconds)
    notification_timeout_seconds: int = 30

    # =========================================================================
    # Recipient Directory (Azure SQL via pyodbc)
    # =========================================================================
    directory_sql_server: Optional[str] = None  # e.g., episodes-db.database.windows.net
    directory_sql_database: Optional[str] = None
    directory_sql_username: Optional[str] = None
    directory_sql_password: Optional[str] = None

    # Debug Configuration
    debug_agent_io: bool = False  # Log agent inputs/outputs
    debug_api_calls: bool = False  # Log LLM API call details
    debug_log_dir: str = "logs/debug"  # Directory for debug logs

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def directory_configured(self) -> bool:
        """True when every SQL directory setting is present."""
        return all([
            self.directory_sql_server,
            self.directory_sql_database,
            self.directory_sql_username,
            self.directory_sql_password,
        ])


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once.
    """
    return Settings()
