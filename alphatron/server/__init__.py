"""HTTP server and event routing."""

from .app import BotServer, create_app
from .router import EventRouter

__all__ = ["BotServer", "EventRouter", "create_app"]
