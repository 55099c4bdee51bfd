"""
Integration tests for streamchat.

These tests reach the real session page and live chat endpoint. They require:
- Network access
- STREAMCHAT_LIVE_SESSION_ID pointing at a session with live chat enabled
"""
