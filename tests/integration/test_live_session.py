"""
Integration tests against a real live session.
"""
import asyncio

import pytest

from streamchat.ingest.chat import CHAT_EVENT, ChatPoller
from streamchat.ingest.page import resolve_session_metadata
from streamchat.schemas.session import SessionConfig


@pytest.mark.integration
@pytest.mark.asyncio
async def test_resolve_live_session(live_session_id, live_client):
    """Test that a live session page yields all three tokens."""
    metadata = await resolve_session_metadata(live_client, live_session_id)

    assert metadata.access_key
    assert metadata.client_version
    assert metadata.continuation


@pytest.mark.integration
@pytest.mark.asyncio
async def test_poll_live_chat(live_session_id, live_client):
    """Test that one poll interval produces a chat event."""
    config = SessionConfig(session_id=live_session_id, poll_interval_seconds=2)
    poller = ChatPoller(config, http_client=live_client)
    received = []
    poller.on(CHAT_EVENT, received.append)

    await poller.connect()
    try:
        for _ in range(50):
            if received:
                break
            await asyncio.sleep(0.1)
    finally:
        await poller.close()

    assert received
    assert isinstance(received[0], dict)
