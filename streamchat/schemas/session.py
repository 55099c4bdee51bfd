"""
Live Chat Session Schemas

Pydantic models for the session configuration, the metadata scraped from
the session page, and the envelope carried on the event bus.
"""

from __future__ import annotations

from typing import Any
from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from streamchat.config import settings


class SessionConfig(BaseModel):
    """Caller-supplied settings for one polling session."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(min_length=1, description="Video / live session id")
    poll_interval_seconds: PositiveInt = Field(description="Seconds between fetches")

    @classmethod
    def from_settings(cls) -> "SessionConfig":
        """Build a config from SESSION_ID and POLL_INTERVAL_SECONDS."""
        if not settings.session_id:
            raise ValueError("SESSION_ID is not configured")
        return cls(
            session_id=settings.session_id,
            poll_interval_seconds=settings.poll_interval_seconds,
        )


class SessionMetadata(BaseModel):
    """Tokens scraped from the session page, required by every update fetch."""

    model_config = ConfigDict(frozen=True)

    access_key: str = Field(min_length=1)
    client_version: str = Field(min_length=1)
    continuation: str = Field(min_length=1)

    def with_continuation(self, continuation: str) -> "SessionMetadata":
        """Return a copy pointing at a newer continuation token."""
        return SessionMetadata(
            access_key=self.access_key,
            client_version=self.client_version,
            continuation=continuation,
        )


class EventPayload(BaseModel):
    """Envelope broadcast on the event bus."""

    model_config = ConfigDict(frozen=True)

    event_name: str
    data: Any = None
