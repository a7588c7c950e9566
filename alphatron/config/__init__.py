"""Configuration management with Pydantic models."""

from .cache import SettingsCache
from .settings import BotSettings, ServiceSettings
from .watcher import SettingsWatcher

__all__ = ["BotSettings", "ServiceSettings", "SettingsCache", "SettingsWatcher"]
