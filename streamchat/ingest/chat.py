"""
Live Chat Polling Service

Resolves a live session into its chat metadata, then polls the live chat
endpoint on a fixed interval and publishes every response on the event bus.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional
import httpx

from streamchat.config import settings
from streamchat.ingest.page import resolve_session_metadata
from streamchat.schemas.session import SessionConfig, SessionMetadata
from streamchat.utils.events import EventBus, Subscription
from streamchat.utils.logging import get_logger

logger = get_logger(__name__, category="chat")

# Event name for raw live chat responses
CHAT_EVENT = "chat"
CLIENT_NAME = "WEB"


def build_chat_request(metadata: SessionMetadata) -> Dict[str, Any]:
    """JSON body for one live chat fetch."""
    return {
        "context": {
            "client": {
                "clientVersion": metadata.client_version,
                "clientName": CLIENT_NAME,
            }
        },
        "continuation": metadata.continuation,
    }


def next_continuation(body: Any) -> Optional[str]:
    """
    Find the continuation token for the next fetch in a live chat response.

    The token sits under one of several continuation kinds
    (invalidation, timed, reload), so take whichever is present.
    Anything that does not have the expected shape yields None.
    """
    if not isinstance(body, dict):
        return None
    contents = body.get("continuationContents")
    if not isinstance(contents, dict):
        return None
    live_chat = contents.get("liveChatContinuation")
    if not isinstance(live_chat, dict):
        return None
    continuations = live_chat.get("continuations")
    if not isinstance(continuations, list) or not continuations:
        return None
    if not isinstance(continuations[0], dict):
        return None
    for data in continuations[0].values():
        if isinstance(data, dict) and isinstance(data.get("continuation"), str) and data["continuation"]:
            return data["continuation"]
    return None


class ChatPoller:
    """Polls one live session's chat and emits each response on an EventBus."""

    def __init__(
        self,
        config: SessionConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Initialize the live chat poller.

        Args:
            config: Session id and poll interval
            http_client: Client used for page and API requests (created if omitted)
            event_bus: Bus to publish on (created if omitted)
        """
        self.config = config
        self.events = event_bus or EventBus()

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=settings.chat_http_timeout,
            follow_redirects=True,
        )

        # Polling state
        self.initialized = False
        self.metadata: Optional[SessionMetadata] = None
        self._stop_event = asyncio.Event()
        self._connect_lock = asyncio.Lock()
        self.poll_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.poll_task is not None and not self.poll_task.done()

    def on(
        self, event_name: str, handler: Callable[[Any], Any], payload_type: Any = None
    ) -> Subscription:
        """Subscribe a handler to this poller's event bus."""
        return self.events.subscribe(event_name, handler, payload_type)

    async def connect(self) -> None:
        """
        Resolve session metadata and start the polling loop.

        Calling connect on an already initialized poller does nothing.

        Raises:
            SessionResolutionError: if the session page cannot be resolved
        """
        # Overlapping callers wait here; the loser sees initialized and returns
        async with self._connect_lock:
            if self.initialized:
                logger.debug(f"Chat poller for {self.config.session_id} already initialized")
                return

            metadata = await resolve_session_metadata(self.http_client, self.config.session_id)

            self.metadata = metadata
            self.initialized = True
            self.poll_task = asyncio.create_task(
                self._poll_loop(metadata), name=f"chat-poller:{self.config.session_id}"
            )
            self.poll_task.add_done_callback(self._on_loop_exit)

        logger.info(
            f"Started chat polling for session {self.config.session_id} "
            f"(every {self.config.poll_interval_seconds}s)"
        )

    def stop(self) -> None:
        """Signal the polling loop to exit at its next wake-up. Safe before connect."""
        if not self.initialized:
            return
        self._stop_event.set()

    async def close(self) -> None:
        """Stop polling, wait for the loop, and release the bus and HTTP client."""
        self.stop()

        if self.poll_task:
            try:
                await self.poll_task
            except asyncio.CancelledError:
                # The loop task may have been cancelled by an outer teardown
                pass

        await self.events.close()

        if self._owns_client:
            await self.http_client.aclose()

        logger.info(f"Chat poller for {self.config.session_id} closed")

    async def __aenter__(self) -> "ChatPoller":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _poll_loop(self, metadata: SessionMetadata) -> None:
        """Fetch on every interval until the stop signal is set."""
        interval = self.config.poll_interval_seconds
        current = metadata

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

            # Stop wins over a tick that elapsed at the same time
            if self._stop_event.is_set():
                break

            try:
                current = await self._poll_once(current)
            except Exception as e:
                logger.error(f"Error in chat polling tick, skipping: {e}", exc_info=True)

        logger.info(f"Stopping chat polling for session {self.config.session_id}")

    async def _poll_once(self, current: SessionMetadata) -> SessionMetadata:
        """Run one fetch-and-emit cycle; return the metadata for the next tick."""
        body = await self.fetch_update(current)
        if body is None:
            return current

        # The page continuation only covers the first fetch; the
        # response carries the cursor for the next one.
        token = next_continuation(body)
        if settings.chat_advance_continuation and token and token != current.continuation:
            logger.debug(f"Continuation advanced to {token[:16]}...")
            return current.with_continuation(token)
        return current

    async def fetch_update(self, metadata: SessionMetadata) -> Optional[Any]:
        """
        Fetch one batch of live chat updates and emit it.

        Errors are logged and swallowed so the loop moves on to the next tick.

        Returns:
            Decoded response body, or None if the fetch failed
        """
        try:
            response = await self.http_client.post(
                settings.chat_api_url,
                params={"key": metadata.access_key},
                json=build_chat_request(metadata),
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Failed to fetch live chat: {e.response.status_code} - {e.response.text[:200]}"
            )
            return None
        except httpx.HTTPError as e:
            logger.error(f"Error fetching live chat: {e}")
            return None
        except ValueError as e:
            logger.error(f"Live chat response was not JSON: {e}")
            return None

        if self._stop_event.is_set():
            logger.debug("Stop requested during fetch, discarding response")
            return None

        receivers = self.events.emit(CHAT_EVENT, body)
        logger.debug(f"Emitted live chat update to {receivers} subscribers")
        return body

    def _on_loop_exit(self, task: asyncio.Task) -> None:
        self.poll_task = None
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                f"Chat polling loop crashed: {task.exception()}",
                exc_info=task.exception(),
            )
