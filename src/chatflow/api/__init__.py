"""FastAPI application module.

Provides the chat workflow editing API, chat sessions and the chat WebSocket.
"""

from .main import create_app

__all__ = ["create_app"]
