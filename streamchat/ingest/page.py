"""
Session Page Scraper

Resolves a session id into SessionMetadata by downloading the session's
watch page and pulling the tokens out of its embedded script state.
Extraction is a pure function of the page text so it can be tested with
canned HTML.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Type
import httpx

from streamchat.config import settings
from streamchat.ingest.errors import (
    AccessKeyNotFoundError,
    ChatUnavailableError,
    ClientVersionNotFoundError,
    ContinuationNotFoundError,
    PageFetchError,
    SessionNotFoundError,
    SessionResolutionError,
)
from streamchat.schemas.session import SessionMetadata
from streamchat.utils.logging import get_logger

logger = get_logger(__name__, category="chat")


@dataclass(frozen=True)
class MarkerExtractor:
    """One required marker in the page, and the error raised when it is missing."""

    name: str
    pattern: re.Pattern
    error: Type[SessionResolutionError]

    def search(self, html: str) -> Optional[str]:
        match = self.pattern.search(html)
        if not match:
            return None
        # Markers without a capture group only need to be present
        value = match.group(1) if self.pattern.groups else match.group(0)
        return value or None


CANONICAL = MarkerExtractor(
    name="canonical",
    pattern=re.compile(
        r'<link rel="canonical" href="https://www\.youtube\.com/watch\?v=([^"&]+)"'
    ),
    error=SessionNotFoundError,
)
CHAT_RENDERER = MarkerExtractor(
    name="live_chat_renderer",
    pattern=re.compile(r"liveChatRenderer"),
    error=ChatUnavailableError,
)
ACCESS_KEY = MarkerExtractor(
    name="access_key",
    pattern=re.compile(r'"INNERTUBE_API_KEY"\s*:\s*"([^"]+)"'),
    error=AccessKeyNotFoundError,
)
CLIENT_VERSION = MarkerExtractor(
    name="client_version",
    pattern=re.compile(r'"clientVersion"\s*:\s*"([^"]+)"'),
    error=ClientVersionNotFoundError,
)
CONTINUATION = MarkerExtractor(
    name="continuation",
    pattern=re.compile(r'"continuation"\s*:\s*"([^"]+)"'),
    error=ContinuationNotFoundError,
)

# Checked in this order; the first missing marker fails the resolution
EXTRACTORS = (CANONICAL, CHAT_RENDERER, ACCESS_KEY, CLIENT_VERSION, CONTINUATION)


def extract_session_metadata(html: str, session_id: str) -> SessionMetadata:
    """
    Extract access key, client version and continuation from a session page.

    Args:
        html: Raw page text
        session_id: The id the page was requested for

    Returns:
        SessionMetadata with all three tokens

    Raises:
        SessionResolutionError subclass naming the first missing marker
    """
    found = {}
    for extractor in EXTRACTORS:
        value = extractor.search(html)
        if value is None:
            logger.warning(f"Marker '{extractor.name}' missing for session {session_id}")
            raise extractor.error(session_id)
        # A canonical link pointing elsewhere means the id was redirected or unknown
        if extractor is CANONICAL and value != session_id:
            logger.warning(
                f"Canonical session mismatch: requested {session_id}, page is {value}"
            )
            raise SessionNotFoundError(session_id)
        found[extractor.name] = value

    return SessionMetadata(
        access_key=found[ACCESS_KEY.name],
        client_version=found[CLIENT_VERSION.name],
        continuation=found[CONTINUATION.name],
    )


def session_page_url(session_id: str) -> str:
    return settings.chat_page_url_template.format(session_id=session_id)


async def fetch_session_page(client: httpx.AsyncClient, session_id: str) -> str:
    """Download the watch page for a session."""
    url = session_page_url(session_id)
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(
            f"Failed to fetch session page: {e.response.status_code} - {url}"
        )
        raise PageFetchError(
            session_id, f"Session page returned {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        logger.error(f"Error fetching session page {url}: {e}")
        raise PageFetchError(session_id) from e

    return response.text


async def resolve_session_metadata(
    client: httpx.AsyncClient, session_id: str
) -> SessionMetadata:
    """Fetch the session page and extract its metadata. No retries."""
    html = await fetch_session_page(client, session_id)
    metadata = extract_session_metadata(html, session_id)
    logger.info(
        f"Resolved session {session_id}: client_version={metadata.client_version}, "
        f"continuation={metadata.continuation[:16]}..."
    )
    return metadata
