"""Main entry point for Alphatron."""

import sys
from pathlib import Path

from aiohttp import web

from .config import ServiceSettings, SettingsCache, SettingsWatcher
from .errors import StartupError, UnknownFeatureError
from .features import get_feature_registry
from .server import EventRouter, create_app
from .storage import JsonFileDocumentStore
from .utils import setup_logging

# Import built-in features to register them
from .features import builtin  # noqa: F401


def main() -> None:
    """Main entry point for the bot."""
    settings = ServiceSettings()

    # Setup structured logging
    logger = setup_logging(settings.log_level, settings.log_format)

    logger.info("Starting Alphatron", port=settings.port, data_dir=settings.data_dir)

    store = JsonFileDocumentStore(Path(settings.data_dir))

    registry = get_feature_registry()
    try:
        if settings.enabled_features is None:
            features = registry.get_features()
        else:
            features = registry.select(settings.enabled_features)
    except UnknownFeatureError as e:
        logger.error("Failed to load features", error=str(e))
        sys.exit(1)

    registry.bind_all(store)
    logger.info("Features loaded", features=[feature.name for feature in features])

    cache = SettingsCache()
    watcher = SettingsWatcher(
        store,
        cache,
        settings.settings_document,
        poll_interval=settings.settings_poll_interval,
    )
    router = EventRouter(cache, features, deadline_seconds=settings.handler_deadline_seconds)
    app = create_app(settings, router, watcher=watcher, store=store)

    try:
        web.run_app(app, host=settings.host, port=settings.port, print=None)
    except StartupError as e:
        logger.error("Alphatron failed to start", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
