"""Exceptions shared across Alphatron subsystems."""


class AlphatronError(Exception):
    """Base class for all Alphatron errors."""


class StartupError(AlphatronError):
    """Raised when the service cannot start (settings or features unavailable)."""


class SettingsNotLoadedError(AlphatronError):
    """Raised when settings are read before they were loaded."""


class DocumentStoreError(AlphatronError):
    """Raised when a document cannot be read or written."""


class UnknownFeatureError(AlphatronError):
    """Raised when a feature name is not registered."""
