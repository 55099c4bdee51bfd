"""
streamchat
Live chat ingestion: resolves a live session from its watch page and polls
the chat endpoint, publishing every update on an in-process event bus
"""

__version__ = "0.1.0"
