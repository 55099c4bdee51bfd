"""
In-process Event Bus

Broadcasts named events to any number of subscribers. Each subscriber owns a
bounded buffer; when it falls behind, the oldest pending event is dropped
instead of blocking the producer (lagging receiver). Payloads travel as
JSON-compatible data and are decoded into the type each handler expects.

Usage:
    bus = EventBus()

    async def on_chat(body: dict) -> None:
        ...

    bus.subscribe("chat", on_chat)
    bus.emit("chat", {"continuationContents": {...}})
"""

from __future__ import annotations

import asyncio
import inspect
import typing
from typing import Any, Callable, List, Optional
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from streamchat.config import settings
from streamchat.schemas.session import EventPayload
from streamchat.utils.logging import get_logger

logger = get_logger(__name__, category="events")

_SERIALIZER = TypeAdapter(Any)


class EventSerializationError(Exception):
    """Raised when an emitted value cannot be turned into a bus payload."""


def _handler_payload_type(handler: Callable) -> Any:
    """Return the annotation of the handler's first parameter, or Any."""
    try:
        params = list(inspect.signature(handler).parameters.values())
    except (TypeError, ValueError):
        return Any
    if not params:
        return Any
    try:
        hints = typing.get_type_hints(handler)
    except (NameError, TypeError):
        hints = {}
    return hints.get(params[0].name, Any)


class Subscription:
    """A single listener attached to an EventBus."""

    def __init__(self, event_name: str, capacity: int):
        self.event_name = event_name
        self.lagged = 0  # Events dropped because the buffer was full
        self.task: Optional[asyncio.Task] = None
        self._cancelled = False
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)

    @property
    def active(self) -> bool:
        return not self._cancelled and self.task is not None and not self.task.done()

    def cancel(self) -> None:
        self._cancelled = True
        if self.task:
            self.task.cancel()

    def _deliver(self, payload: EventPayload) -> None:
        if self._queue.full():
            self._queue.get_nowait()
            self.lagged += 1
        self._queue.put_nowait(payload)


class EventBus:
    """Typed publish/subscribe with lossy, non-blocking fan-out."""

    def __init__(self, capacity: Optional[int] = None):
        self.capacity = settings.event_bus_capacity if capacity is None else capacity
        if self.capacity < 1:
            raise ValueError("Event bus capacity must be positive")
        self._subscriptions: List[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return sum(1 for sub in self._subscriptions if sub.active)

    def subscribe(
        self,
        event_name: str,
        handler: Callable[[Any], Any],
        payload_type: Any = None,
    ) -> Subscription:
        """
        Register a handler for one event name.

        Must be called from a running event loop. Only events emitted after
        this call are delivered.

        Args:
            event_name: Event to listen for
            handler: Sync or async callable taking the decoded payload
            payload_type: Type to decode into (defaults to the handler's
                          first parameter annotation, else Any)

        Returns:
            Subscription handle
        """
        if payload_type is None:
            payload_type = _handler_payload_type(handler)
        adapter = TypeAdapter(payload_type)

        self._prune()
        subscription = Subscription(event_name, self.capacity)
        subscription.task = asyncio.get_running_loop().create_task(
            self._listen(subscription, handler, adapter),
            name=f"event-bus:{event_name}",
        )
        self._subscriptions.append(subscription)
        logger.debug(f"Subscribed to '{event_name}' (subscribers: {len(self._subscriptions)})")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.cancel()
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def emit(self, event_name: str, value: Any) -> int:
        """
        Broadcast a value to every current subscriber.

        Never blocks and never fails for lack of listeners.

        Returns:
            Number of subscribers the event was handed to
        """
        try:
            data = _SERIALIZER.dump_python(value, mode="json")
        except PydanticSerializationError as e:
            raise EventSerializationError(
                f"Cannot serialize payload for '{event_name}': {e}"
            ) from e

        payload = EventPayload(event_name=event_name, data=data)
        self._prune()
        receivers = list(self._subscriptions)
        if not receivers:
            logger.debug(f"No subscribers for '{event_name}', dropping event")
            return 0

        for sub in receivers:
            sub._deliver(payload)
        return len(receivers)

    def _prune(self) -> None:
        # Drop subscriptions cancelled directly through Subscription.cancel
        self._subscriptions = [sub for sub in self._subscriptions if sub.active]

    async def close(self) -> None:
        """Cancel every subscription task and wait for them to finish."""
        subscriptions, self._subscriptions = self._subscriptions, []
        tasks = [sub.task for sub in subscriptions if sub.task]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug(f"Event bus closed ({len(tasks)} subscriptions cancelled)")

    async def _listen(
        self, subscription: Subscription, handler: Callable, adapter: TypeAdapter
    ) -> None:
        reported_lag = 0
        while True:
            payload = await subscription._queue.get()

            if subscription.lagged > reported_lag:
                logger.warning(
                    f"Subscriber for '{subscription.event_name}' lagged, "
                    f"missed {subscription.lagged - reported_lag} events"
                )
                reported_lag = subscription.lagged

            if payload.event_name != subscription.event_name:
                continue

            try:
                value = adapter.validate_python(payload.data)
            except ValidationError as e:
                logger.error(f"Failed to decode '{payload.event_name}' payload: {e}")
                continue

            try:
                result = handler(value)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Error in handler for '{payload.event_name}': {e}", exc_info=True
                )
