"""Slack event models."""

from .models import (
    EVENT_CALLBACK,
    AppMentionEvent,
    BaseEvent,
    Event,
    EventEnvelope,
    MessageEvent,
    UnrecognizedEvent,
    parse_event,
)

__all__ = [
    "EVENT_CALLBACK",
    "AppMentionEvent",
    "BaseEvent",
    "Event",
    "EventEnvelope",
    "MessageEvent",
    "UnrecognizedEvent",
    "parse_event",
]
