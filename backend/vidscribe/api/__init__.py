"""API routes for the media summarization pipeline."""

from vidscribe.api import routes, websocket

__all__ = ["routes", "websocket"]
