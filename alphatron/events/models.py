"""Inbound Slack request and event models."""

from typing import Any, Dict, List, Literal, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError


logger = structlog.get_logger(__name__)

EVENT_CALLBACK = "event_callback"


class EventEnvelope(BaseModel):
    """Outer body of a Slack Events API request."""

    model_config = ConfigDict(extra="ignore")

    token: Optional[str] = None
    type: Optional[str] = None
    event: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_event_callback(self) -> bool:
        return self.type == EVENT_CALLBACK


class BaseEvent(BaseModel):
    """Fields shared by every event variant."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str
    channel: Optional[str] = None
    user: Optional[str] = None
    text: str = ""
    ts: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict, exclude=True)

    def words(self) -> List[str]:
        """Split the message text on whitespace."""
        return self.text.split()


class AppMentionEvent(BaseEvent):
    """The bot was @-mentioned in a channel."""

    type: Literal["app_mention"] = "app_mention"


class MessageEvent(BaseEvent):
    """A message was posted in a channel the bot is in."""

    type: Literal["message"] = "message"
    subtype: Optional[str] = None


class UnrecognizedEvent(BaseEvent):
    """Any event type the bot has no model for."""


Event = Union[AppMentionEvent, MessageEvent, UnrecognizedEvent]

_EVENT_TYPES = {
    "app_mention": AppMentionEvent,
    "message": MessageEvent,
}


def parse_event(data: Dict[str, Any]) -> Event:
    """Build the event variant matching the payload's type.

    Args:
        data: The 'event' object of an event callback

    Returns:
        A typed event; UnrecognizedEvent for unknown or malformed payloads
    """
    event_type = data.get("type")
    model = _EVENT_TYPES.get(event_type) if isinstance(event_type, str) else None

    if model is not None:
        payload = {**data, "raw": data}
        if payload.get("text") is None:
            payload["text"] = ""
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.warning("Malformed event payload", event_type=event_type, error=str(e))

    return UnrecognizedEvent(type=str(event_type or ""), raw=data)
