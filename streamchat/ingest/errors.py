"""
Resolution errors raised while turning a session id into SessionMetadata.
"""

from __future__ import annotations


class SessionResolutionError(Exception):
    """Base class for failures of a connect attempt."""

    default_message = "Session could not be resolved"

    def __init__(self, session_id: str, message: str | None = None):
        self.session_id = session_id
        super().__init__(f"{message or self.default_message} (session: {session_id})")


class PageFetchError(SessionResolutionError):
    default_message = "Failed to fetch session page"


class SessionNotFoundError(SessionResolutionError):
    default_message = "Video or stream not found"


class ChatUnavailableError(SessionResolutionError):
    default_message = "No live chat available for this session"


class AccessKeyNotFoundError(SessionResolutionError):
    default_message = "Access key not found"


class ClientVersionNotFoundError(SessionResolutionError):
    default_message = "Client version not found"


class ContinuationNotFoundError(SessionResolutionError):
    default_message = "Continuation not found"
