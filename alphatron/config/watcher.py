"""Loading and hot-reloading of the bot settings document."""

import asyncio
import hashlib
import json
from typing import Any, Dict, Optional, Tuple

import structlog
from pydantic import ValidationError

from ..errors import DocumentStoreError, StartupError
from ..storage import DocumentStore
from .cache import SettingsCache
from .settings import BotSettings


logger = structlog.get_logger(__name__)

SETTINGS_COLLECTION = "settings"


def _checksum(data: Dict[str, Any]) -> str:
    json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
    return hashlib.sha256(json_str.encode()).hexdigest()


class SettingsWatcher:
    """Keeps a SettingsCache in sync with the settings document."""

    def __init__(
        self,
        store: DocumentStore,
        cache: SettingsCache,
        document_id: str,
        poll_interval: float = 5,
    ) -> None:
        """Initialize settings watcher.

        Args:
            store: Document store holding the settings document
            cache: Cache that receives every new settings value
            document_id: Id of the document in the 'settings' collection
            poll_interval: Seconds between change checks
        """
        self.store = store
        self.cache = cache
        self.document_id = document_id
        self.poll_interval = poll_interval

        self._checksum: Optional[str] = None
        self._watch_task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def document_path(self) -> str:
        return f"{SETTINGS_COLLECTION}/{self.document_id}"

    async def _fetch(self) -> Tuple[BotSettings, str]:
        data = await self.store.get(SETTINGS_COLLECTION, self.document_id)
        if data is None:
            raise DocumentStoreError(f"Settings document '{self.document_path}' does not exist")

        return BotSettings.model_validate(data), _checksum(data)

    async def load(self) -> BotSettings:
        """Load the settings document into the cache.

        Raises:
            StartupError: If the document is missing, unreadable or invalid
        """
        try:
            settings, checksum = await self._fetch()
        except (DocumentStoreError, ValidationError) as e:
            logger.error("Error loading settings", document=self.document_path, error=str(e))
            raise StartupError(f"Cannot load settings from '{self.document_path}'") from e

        await self.cache.replace(settings)
        self._checksum = checksum

        logger.info("Settings loaded", document=self.document_path, checksum=checksum[:8])
        return settings

    async def refresh(self) -> bool:
        """Reload the settings if the document changed.

        Failures keep the last known good settings in place.

        Returns:
            True if the cached settings were replaced
        """
        try:
            settings, checksum = await self._fetch()
        except (DocumentStoreError, ValidationError) as e:
            logger.warning(
                "Failed to reload settings, keeping last known good value",
                document=self.document_path,
                error=str(e),
            )
            return False

        if checksum == self._checksum:
            return False

        await self.cache.replace(settings)
        self._checksum = checksum

        logger.info(
            "Settings reloaded because a change was detected",
            document=self.document_path,
            checksum=checksum[:8],
        )
        return True

    async def start(self) -> None:
        """Start polling for settings changes."""
        if self._watch_task is not None:
            logger.warning("Settings watcher already started", document=self.document_path)
            return

        self._stop_event.clear()
        self._watch_task = asyncio.create_task(self._watch_loop())
        logger.info(
            "Started settings watcher",
            document=self.document_path,
            poll_interval=self.poll_interval,
        )

    async def stop(self) -> None:
        """Stop polling for settings changes."""
        self._stop_event.set()

        if self._watch_task:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        logger.info("Stopped settings watcher", document=self.document_path)

    async def _watch_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)
                break  # Stop event was set
            except asyncio.TimeoutError:
                pass

            try:
                await self.refresh()
            except Exception as e:
                logger.error("Error in settings watch loop", document=self.document_path, error=str(e))
