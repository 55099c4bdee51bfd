"""
Integration test fixtures for live sessions.
"""
import os

import httpx
import pytest
import pytest_asyncio

from streamchat.config import settings


LIVE_SESSION_ID = os.getenv("STREAMCHAT_LIVE_SESSION_ID")


@pytest.fixture
def live_session_id():
    """Session id of a live stream, or skip when none is configured."""
    if not LIVE_SESSION_ID:
        pytest.skip("STREAMCHAT_LIVE_SESSION_ID not set")
    return LIVE_SESSION_ID


@pytest_asyncio.fixture
async def live_client():
    """Real HTTP client; skips if the page host is unreachable."""
    client = httpx.AsyncClient(timeout=settings.chat_http_timeout, follow_redirects=True)
    try:
        await client.head("https://www.youtube.com", timeout=5.0)
    except httpx.HTTPError as e:
        await client.aclose()
        pytest.skip(f"Session page host not reachable: {e}")

    yield client
    await client.aclose()
