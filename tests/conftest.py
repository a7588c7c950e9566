"""Pytest configuration and fixtures for Alphatron tests."""

from typing import Any, Dict, List

import pytest
from aiohttp.test_utils import TestClient, TestServer

from alphatron.config import BotSettings, ServiceSettings, SettingsCache, SettingsWatcher
from alphatron.features.builtin.increment import IncrementFeature
from alphatron.features.builtin.ping import PingFeature
from alphatron.server import EventRouter, create_app
from alphatron.storage import MemoryDocumentStore


VERIFICATION_TOKEN = "test-token"


class RecordingSink:
    """Response sink that remembers every write."""

    def __init__(self) -> None:
        self.writes: List[Dict[str, Any]] = []

    def send_json(self, payload: Dict[str, Any]) -> None:
        self.writes.append(payload)


@pytest.fixture
def sink():
    """Provide a recording response sink."""
    return RecordingSink()


@pytest.fixture
def service_settings():
    """Provide test service settings."""
    return ServiceSettings(
        log_level="DEBUG",
        handler_deadline_seconds=0.5,
        settings_poll_interval=1,
        metrics_enabled=True,
    )


@pytest.fixture
def document_store():
    """Provide a document store holding the bot settings."""
    return MemoryDocumentStore({
        ("settings", "bot"): {"token": VERIFICATION_TOKEN},
    })


@pytest.fixture
def settings_cache():
    """Provide a settings cache that is already loaded."""
    return SettingsCache(BotSettings(token=VERIFICATION_TOKEN))


@pytest.fixture
def ping_feature():
    """Provide the ping feature."""
    return PingFeature("ping", "Reply 'pong' to '@bot ping'")


@pytest.fixture
def increment_feature(document_store):
    """Provide the increment feature bound to the test store."""
    feature = IncrementFeature("increment", "Post and bump a counter")
    feature.bind(document_store)
    return feature


@pytest.fixture
async def make_client(service_settings, document_store):
    """Provide a factory for test clients around the bot application."""
    clients = []

    async def factory(features, deadline_seconds=None, cache=None, poll_interval=1):
        cache = cache or SettingsCache()
        watcher = SettingsWatcher(document_store, cache, "bot", poll_interval=poll_interval)
        router = EventRouter(
            cache,
            features,
            deadline_seconds=deadline_seconds or service_settings.handler_deadline_seconds,
        )
        app = create_app(service_settings, router, watcher=watcher, store=document_store)

        client = TestClient(TestServer(app))
        await client.start_server()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.close()


@pytest.fixture
def event_request():
    """Provide a builder for app mention event callbacks."""

    def build(text: str, token: str = VERIFICATION_TOKEN, **event: Any) -> Dict[str, Any]:
        return {
            "token": token,
            "type": "event_callback",
            "event": {
                "type": "app_mention",
                "channel": "C024BE91L",
                "user": "U2147483697",
                "text": text,
                **event,
            },
        }

    return build
