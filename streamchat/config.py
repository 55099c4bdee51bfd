"""
Configuration Management

All tunables for the chat poller live here. Values load from environment
variables (case-insensitive) and an optional .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application Settings

    Variable names match field names, e.g. POLL_INTERVAL_SECONDS=5.
    """

    log_level: str = "INFO"
    log_categories: Optional[str] = None  # Comma-separated categories (chat,events,system). If None, show all logs.

    # Session defaults (used by SessionConfig.from_settings)
    session_id: Optional[str] = None
    poll_interval_seconds: int = 3

    # Live chat endpoints
    chat_page_url_template: str = "https://www.youtube.com/watch?v={session_id}"
    chat_api_url: str = "https://www.youtube.com/youtubei/v1/live_chat/get_live_chat"
    chat_http_timeout: float = 30.0
    chat_advance_continuation: bool = True  # Roll the continuation forward after each fetch

    # Event bus
    event_bus_capacity: int = 16  # Pending events per subscriber before the oldest is dropped

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Allow extra env vars without validation errors


# Loaded once when the module is imported
settings = Settings()

"""
USAGE EXAMPLE:
    from streamchat.config import settings

    print(settings.poll_interval_seconds)  # 3
    print(settings.event_bus_capacity)     # 16
"""
