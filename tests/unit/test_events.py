"""Unit tests for event models."""

import pytest
from pydantic import ValidationError

from alphatron.events import (
    AppMentionEvent,
    EventEnvelope,
    MessageEvent,
    UnrecognizedEvent,
    parse_event,
)


class TestEventEnvelope:
    """Test EventEnvelope model."""

    def test_event_callback(self):
        """Test recognising an event callback."""
        envelope = EventEnvelope.model_validate({
            "token": "abc",
            "type": "event_callback",
            "team_id": "T1",
            "event": {"type": "app_mention"},
        })

        assert envelope.is_event_callback
        assert envelope.event == {"type": "app_mention"}

    def test_other_request_types(self):
        """Test that other request types are not event callbacks."""
        assert not EventEnvelope(type="url_verification").is_event_callback
        assert not EventEnvelope().is_event_callback

    def test_event_must_be_object(self):
        """Test that a non-object event is rejected."""
        with pytest.raises(ValidationError):
            EventEnvelope.model_validate({"type": "event_callback", "event": "ping"})


class TestParseEvent:
    """Test parse_event function."""

    def test_app_mention(self):
        """Test parsing an app mention."""
        data = {"type": "app_mention", "channel": "C1", "user": "U1", "text": "<@B1> ping", "ts": "1.0"}

        event = parse_event(data)

        assert isinstance(event, AppMentionEvent)
        assert event.channel == "C1"
        assert event.words() == ["<@B1>", "ping"]
        assert event.raw == data

    def test_message(self):
        """Test parsing a channel message."""
        event = parse_event({"type": "message", "channel": "C1", "text": "hello", "subtype": "bot_message"})

        assert isinstance(event, MessageEvent)
        assert event.subtype == "bot_message"

    def test_missing_text(self):
        """Test that a missing or null text becomes empty."""
        event = parse_event({"type": "app_mention", "channel": "C1", "text": None})

        assert isinstance(event, AppMentionEvent)
        assert event.text == ""
        assert event.words() == []

    def test_unknown_type(self):
        """Test that unknown event types fall back to UnrecognizedEvent."""
        data = {"type": "reaction_added", "reaction": "thumbsup"}

        event = parse_event(data)

        assert isinstance(event, UnrecognizedEvent)
        assert event.type == "reaction_added"
        assert event.raw == data

    def test_malformed_known_type(self):
        """Test that a malformed payload falls back to UnrecognizedEvent."""
        event = parse_event({"type": "app_mention", "channel": {"id": "C1"}})

        assert isinstance(event, UnrecognizedEvent)
        assert event.type == "app_mention"

    def test_missing_type(self):
        """Test parsing a payload without a type."""
        event = parse_event({})

        assert isinstance(event, UnrecognizedEvent)
        assert event.type == ""

    def test_events_are_immutable(self):
        """Test that events cannot be modified by features."""
        event = parse_event({"type": "app_mention", "text": "@bot ping"})

        with pytest.raises(ValidationError):
            event.text = "@bot increment"
