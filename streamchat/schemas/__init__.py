from .session import EventPayload, SessionConfig, SessionMetadata

__all__ = ["EventPayload", "SessionConfig", "SessionMetadata"]
