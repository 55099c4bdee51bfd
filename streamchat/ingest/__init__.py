"""
Ingest layer: session page resolution and live chat polling
"""

from .chat import ChatPoller, CHAT_EVENT
from .errors import (
    SessionResolutionError,
    PageFetchError,
    SessionNotFoundError,
    ChatUnavailableError,
    AccessKeyNotFoundError,
    ClientVersionNotFoundError,
    ContinuationNotFoundError,
)
from .page import extract_session_metadata, resolve_session_metadata

__all__ = [
    "ChatPoller",
    "CHAT_EVENT",
    "SessionResolutionError",
    "PageFetchError",
    "SessionNotFoundError",
    "ChatUnavailableError",
    "AccessKeyNotFoundError",
    "ClientVersionNotFoundError",
    "ContinuationNotFoundError",
    "extract_session_metadata",
    "resolve_session_metadata",
]
