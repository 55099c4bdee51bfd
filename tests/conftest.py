import asyncio
import json
from typing import Any, List, Optional

import httpx
import pytest


SESSION_ID = "ABC123"


def build_session_page(
    session_id: str = SESSION_ID,
    canonical_id: Optional[str] = None,
    chat: bool = True,
    access_key: Optional[str] = "K1",
    client_version: Optional[str] = "V1",
    continuation: Optional[str] = "C1",
    canonical: bool = True,
) -> str:
    """Build a minimal watch page carrying the markers the scraper looks for."""
    head = ""
    if canonical:
        head = (
            '<link rel="canonical" href="https://www.youtube.com/watch?v='
            f'{canonical_id or session_id}">'
        )

    config = []
    if access_key:
        config.append(f'"INNERTUBE_API_KEY":"{access_key}"')
    if client_version:
        config.append(
            f'"INNERTUBE_CONTEXT":{{"client":{{"clientName":"WEB","clientVersion":"{client_version}"}}}}'
        )

    continuations = ""
    if continuation:
        continuations = f'"continuations":[{{"reloadContinuationData":{{"continuation":"{continuation}"}}}}]'
    bar_key = "liveChatRenderer" if chat else "conversationBarRenderer"
    initial_data = f'{{"contents":{{"conversationBar":{{"{bar_key}":{{{continuations}}}}}}}}}'

    return (
        f"<html><head>{head}</head><body>"
        f"<script>ytcfg.set({{{','.join(config)}}});</script>"
        f"<script>var ytInitialData = {initial_data};</script>"
        "</body></html>"
    )


def chat_response(continuation: Optional[str] = None) -> dict:
    """Live chat API response, optionally carrying the next continuation."""
    live_chat: dict = {"actions": []}
    if continuation:
        live_chat["continuations"] = [
            {"invalidationContinuationData": {"continuation": continuation, "timeoutMs": 10000}}
        ]
    return {"continuationContents": {"liveChatContinuation": live_chat}}


class FakeYouTube:
    """MockTransport backend serving a watch page and live chat responses."""

    def __init__(self, page: str):
        self.page = page
        self.page_status = 200
        self.chat_responses: List[Any] = []
        self.chat_status = 200
        self.page_requests: List[httpx.Request] = []
        self.chat_requests: List[httpx.Request] = []
        self.chat_request_times: List[float] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            self.page_requests.append(request)
            return httpx.Response(self.page_status, text=self.page)

        self.chat_requests.append(request)
        self.chat_request_times.append(asyncio.get_running_loop().time())
        if self.chat_responses:
            body = self.chat_responses.pop(0)
        else:
            body = chat_response()
        return httpx.Response(self.chat_status, json=body)

    def chat_bodies(self) -> List[dict]:
        return [json.loads(request.content) for request in self.chat_requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def session_page():
    """Factory for canned watch pages."""
    return build_session_page


@pytest.fixture
def fake_youtube():
    return FakeYouTube(build_session_page())


@pytest.fixture
def chat_reply():
    """Factory for live chat API responses."""
    return chat_response
