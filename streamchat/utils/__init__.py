from .events import EventBus, EventSerializationError, Subscription

__all__ = ["EventBus", "EventSerializationError", "Subscription"]
