"""HTTP application serving Slack events, health checks and metrics."""

from datetime import datetime, timezone
from typing import Optional

import structlog
from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .. import __version__
from ..config import ServiceSettings, SettingsWatcher
from ..storage import DocumentStore
from .router import EventRouter


logger = structlog.get_logger(__name__)


class BotServer:
    """aiohttp application wiring the event router to its collaborators."""

    def __init__(
        self,
        settings: ServiceSettings,
        router: EventRouter,
        watcher: Optional[SettingsWatcher] = None,
        store: Optional[DocumentStore] = None,
    ) -> None:
        """Initialize the server.

        Args:
            settings: Service settings
            router: Router handling event callbacks
            watcher: Settings watcher loaded on startup and polled while running
            store: Document store closed on cleanup
        """
        self.settings = settings
        self.router = router
        self.watcher = watcher
        self.store = store
        self._startup_time = datetime.now(timezone.utc)

        self.app = web.Application()
        self.app.router.add_post(settings.events_path, router.handle)
        self.app.router.add_get('/healthz', self._health_handler)
        self.app.router.add_get('/readyz', self._readiness_handler)
        self.app.router.add_get('/stats', self._stats_handler)
        if settings.metrics_enabled:
            self.app.router.add_get('/metrics', self._metrics_handler)

        self.app.on_startup.append(self._on_startup)
        self.app.on_cleanup.append(self._on_cleanup)

        logger.info(
            "Initialized BotServer",
            events_path=settings.events_path,
            metrics_enabled=settings.metrics_enabled,
        )

    async def _on_startup(self, app: web.Application) -> None:
        # Without settings there is no way to authenticate requests
        if self.watcher is not None:
            await self.watcher.load()
            await self.watcher.start()

        logger.info("Alphatron started", version=__version__, features=len(self.router.features))

    async def _on_cleanup(self, app: web.Application) -> None:
        logger.info("Shutting down Alphatron")

        if self.watcher is not None:
            await self.watcher.stop()

        await self.router.close()

        if self.store is not None:
            await self.store.close()

    def _uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self._startup_time).total_seconds()

    async def _health_handler(self, request: web.Request) -> web.Response:
        """Handle liveness checks."""
        health_data = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": self._uptime_seconds(),
            "version": __version__
        }

        return web.json_response(health_data)

    async def _readiness_handler(self, request: web.Request) -> web.Response:
        """Handle readiness checks."""
        checks = {
            "settings": "loaded" if self.router.settings_cache.loaded else "not_loaded",
            "features": len(self.router.features),
        }
        ready = self.router.settings_cache.loaded

        response_data = {
            "status": "ready" if ready else "not_ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks
        }

        return web.json_response(response_data, status=200 if ready else 503)

    async def _stats_handler(self, request: web.Request) -> web.Response:
        """Handle statistics requests."""
        stats = {
            "service": {
                "uptime_seconds": self._uptime_seconds(),
                "startup_time": self._startup_time.isoformat(),
                "version": __version__
            },
            "router": self.router.get_stats(),
        }

        return web.json_response(stats)

    async def _metrics_handler(self, request: web.Request) -> web.Response:
        """Handle Prometheus metrics exposition."""
        return web.Response(
            body=generate_latest(),
            headers={"Content-Type": CONTENT_TYPE_LATEST}
        )


def create_app(
    settings: ServiceSettings,
    router: EventRouter,
    watcher: Optional[SettingsWatcher] = None,
    store: Optional[DocumentStore] = None,
) -> web.Application:
    """Build the aiohttp application for the bot.

    Startup loads settings through the watcher and fails if they cannot be
    loaded. Cleanup stops the watcher, the running handlers and the store.
    """
    return BotServer(settings, router, watcher=watcher, store=store).app
