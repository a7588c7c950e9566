"""Process-wide holder for the current bot settings."""

import asyncio
from typing import Optional

import structlog

from ..errors import SettingsNotLoadedError
from .settings import BotSettings


logger = structlog.get_logger(__name__)


class SettingsCache:
    """Single-slot cache whose value is only ever replaced as a whole."""

    def __init__(self, initial: Optional[BotSettings] = None) -> None:
        self._value = initial
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._value is not None

    async def get(self) -> BotSettings:
        """Get the current settings.

        Raises:
            SettingsNotLoadedError: If no settings have been loaded yet
        """
        async with self._lock:
            if self._value is None:
                raise SettingsNotLoadedError("Settings have not been loaded")
            return self._value

    async def replace(self, value: BotSettings) -> None:
        """Swap in a new settings value."""
        async with self._lock:
            self._value = value
