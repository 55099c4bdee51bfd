"""
Manual smoke test: resolve a live session and print chat updates for a while
"""
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()

from streamchat.ingest import CHAT_EVENT, ChatPoller, SessionResolutionError  # noqa: E402
from streamchat.schemas.session import SessionConfig  # noqa: E402


def print_update(body: dict) -> None:
    live_chat = body.get("continuationContents", {}).get("liveChatContinuation", {})
    actions = live_chat.get("actions", [])
    print(f"  update: {len(actions)} actions, keys={list(body.keys())}")


async def watch(session_id: str, seconds: int) -> int:
    interval = int(os.getenv("POLL_INTERVAL_SECONDS", "3"))
    config = SessionConfig(session_id=session_id, poll_interval_seconds=interval)

    print("=" * 70)
    print(f"WATCHING LIVE CHAT: {session_id} (every {interval}s for {seconds}s)")
    print("=" * 70)

    async with ChatPoller(config) as poller:
        poller.on(CHAT_EVENT, print_update)
        try:
            await poller.connect()
        except SessionResolutionError as e:
            print(f"\n[FAIL] {e}")
            return 1

        print(f"\nMetadata: client_version={poller.metadata.client_version}")
        await asyncio.sleep(seconds)

    print("\n[OK] Stopped")
    return 0


if __name__ == "__main__":
    session_id = sys.argv[1] if len(sys.argv) > 1 else os.getenv("SESSION_ID")
    if not session_id:
        print("Usage: python scripts/watch_live_chat.py <session_id> [seconds]")
        sys.exit(2)
    seconds = int(sys.argv[2]) if len(sys.argv) > 2 else 30
    sys.exit(asyncio.run(watch(session_id, seconds)))
